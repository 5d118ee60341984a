"""
URL configuration for the die/pattern tracking backend.

Only the Django admin is routed here; data entry for indents, orders,
inwards, QC, job-work and outwards goes through the serializers in each app.
"""
from django.contrib import admin
from django.urls import path

admin.site.site_header = "Die & Pattern Management Admin Panel"
admin.site.site_title = "Die & Pattern Management Admin Portal"
admin.site.index_title = "Welcome to Die & Pattern Management"

urlpatterns = [
    path('admin/', admin.site.urls),
]
