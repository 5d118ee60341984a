from django.contrib import admin
from .models import ItemType, Material, Item
from backend.inventory.item_state import resolve_state, get_state_display


@admin.register(ItemType)
class ItemTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['name']
    ordering = ['name']


@admin.register(Material)
class MaterialAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['name']
    ordering = ['name']


@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    list_display = ['current_name', 'main_part_name', 'item_type', 'drawing_no', 'current_holder_type', 'get_process_state', 'is_active']
    list_filter = ['is_active', 'item_type', 'current_holder_type', 'created_at']
    search_fields = ['main_part_name', 'current_name', 'drawing_no']
    ordering = ['current_name']
    readonly_fields = ['created_at', 'updated_at']

    def get_process_state(self, obj):
        return get_state_display(resolve_state(obj.id))
    get_process_state.short_description = 'Process State'
