from django.contrib import admin
from .models import Movement, QualityControl, JobWork, Outward, OutwardLine


@admin.register(Movement)
class MovementAdmin(admin.ModelAdmin):
    list_display = ['movement_no', 'item', 'movement_type', 'from_type', 'to_type', 'to_location', 'to_party', 'is_qc_pending', 'is_qc_approved', 'created_at']
    list_filter = ['movement_type', 'is_qc_pending', 'is_qc_approved', 'created_at']
    search_fields = ['movement_no', 'item__current_name', 'item__main_part_name', 'reason']
    ordering = ['-created_at']
    readonly_fields = ['created_at']


@admin.register(QualityControl)
class QualityControlAdmin(admin.ModelAdmin):
    list_display = ['movement', 'is_approved', 'checked_by', 'checked_at']
    list_filter = ['is_approved', 'checked_at']
    search_fields = ['movement__movement_no', 'remarks']
    ordering = ['-checked_at']


@admin.register(JobWork)
class JobWorkAdmin(admin.ModelAdmin):
    list_display = ['job_work_no', 'item', 'party', 'status', 'created_by', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['job_work_no', 'item__current_name', 'description']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at']


class OutwardLineInline(admin.TabularInline):
    model = OutwardLine
    extra = 0
    raw_id_fields = ['item']


@admin.register(Outward)
class OutwardAdmin(admin.ModelAdmin):
    list_display = ['outward_no', 'outward_date', 'party', 'is_active', 'created_by', 'created_at']
    list_filter = ['is_active', 'outward_date']
    search_fields = ['outward_no', 'party__name', 'remarks']
    ordering = ['-outward_date', '-created_at']
    inlines = [OutwardLineInline]
    readonly_fields = ['created_at', 'updated_at']
