from django.contrib import admin
from .models import PurchaseIndent, PurchaseIndentItem, PurchaseOrder, PurchaseOrderItem


class PurchaseIndentItemInline(admin.TabularInline):
    model = PurchaseIndentItem
    extra = 1
    fields = ['item', 'remarks']
    raw_id_fields = ['item']


@admin.register(PurchaseIndent)
class PurchaseIndentAdmin(admin.ModelAdmin):
    list_display = ['pi_no', 'pi_date', 'indent_type', 'status', 'is_active', 'created_by', 'created_at']
    list_filter = ['status', 'indent_type', 'is_active', 'pi_date']
    search_fields = ['pi_no', 'remarks']
    ordering = ['-pi_date', '-created_at']
    inlines = [PurchaseIndentItemInline]
    readonly_fields = ['approved_by', 'approved_at', 'created_at', 'updated_at']


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    fields = ['purchase_indent_item', 'rate']
    raw_id_fields = ['purchase_indent_item']


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ['po_no', 'vendor', 'po_date', 'delivery_date', 'get_total', 'is_active', 'created_by', 'created_at']
    list_filter = ['is_active', 'vendor', 'po_date']
    search_fields = ['po_no', 'remarks', 'vendor__name']
    ordering = ['-po_date', '-created_at']
    inlines = [PurchaseOrderItemInline]
    readonly_fields = ['created_at', 'updated_at']

    def get_total(self, obj):
        return f"₹{obj.get_total():.2f}"
    get_total.short_description = 'Total'
