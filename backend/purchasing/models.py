from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone
from backend.catalog.models import Item
from backend.parties.models import Party
from backend.core.utils import create_audit_log


class PurchaseIndent(models.Model):
    """Internal request to procure or rework dies/patterns"""
    TYPE_CHOICES = [
        ('new', 'New'),
        ('repair', 'Repair'),
        ('correction', 'Correction'),
        ('modification', 'Modification'),
    ]

    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]
    # Indents in these statuses hold their items in the pipeline
    OPEN_STATUSES = [STATUS_PENDING, STATUS_APPROVED]

    pi_no = models.CharField(max_length=100, unique=True)
    pi_date = models.DateField(default=timezone.localdate)
    indent_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='new')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    remarks = models.TextField(blank=True)
    # Soft-delete flag, independent of status
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='purchase_indents')
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_purchase_indents')
    approved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.pi_no

    def _decide(self, status, user):
        if self.status != self.STATUS_PENDING:
            raise ValidationError(f"Purchase indent {self.pi_no} is already {self.get_status_display().lower()}.")
        self.status = status
        self.approved_by = user
        self.approved_at = timezone.now()
        self.save(update_fields=['status', 'approved_by', 'approved_at', 'updated_at'])
        create_audit_log(
            action=f"indent_{'approve' if status == self.STATUS_APPROVED else 'reject'}",
            model_name='PurchaseIndent',
            object_id=self.id,
            user=user,
            object_name=f"Purchase Indent {self.pi_no}",
            object_reference=self.pi_no,
            changes={'status': status},
        )

    def approve(self, user=None):
        """Approve a pending indent"""
        self._decide(self.STATUS_APPROVED, user)

    def reject(self, user=None):
        """Reject a pending indent; its items are released from the pipeline"""
        self._decide(self.STATUS_REJECTED, user)

    def deactivate(self):
        self.is_active = False
        self.save(update_fields=['is_active', 'updated_at'])

    class Meta:
        db_table = 'purchase_indents'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'is_active'], name='idx_pi_status_active'),
        ]


class PurchaseIndentItem(models.Model):
    """Purchase indent line: one item per line"""
    purchase_indent = models.ForeignKey(PurchaseIndent, on_delete=models.CASCADE, related_name='items')
    item = models.ForeignKey(Item, on_delete=models.CASCADE, related_name='purchase_indent_items')
    remarks = models.TextField(blank=True)
    # Set when the line's order is closed as fully received; the line then stops holding the item
    is_received = models.BooleanField(default=False)

    def __str__(self):
        return f"{self.purchase_indent.pi_no} / {self.item.current_name}"

    class Meta:
        db_table = 'purchase_indent_items'
        ordering = ['id']
        unique_together = [['purchase_indent', 'item']]
        indexes = [
            models.Index(fields=['item', 'purchase_indent'], name='idx_pii_item_indent'),
        ]


class PurchaseOrder(models.Model):
    """Commercial order placed with a vendor from approved indent lines"""
    po_no = models.CharField(max_length=100, unique=True)
    po_date = models.DateField(default=timezone.localdate)
    vendor = models.ForeignKey(Party, on_delete=models.PROTECT, related_name='purchase_orders')
    delivery_date = models.DateField(null=True, blank=True)
    remarks = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='purchase_orders')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.po_no

    def get_total(self):
        """Sum of line rates (one unit per die/pattern)"""
        return sum((line.rate or 0) for line in self.items.all())

    def cancel(self, user=None):
        """Deactivate the order; its indent lines become orderable again"""
        self.is_active = False
        self.save(update_fields=['is_active', 'updated_at'])
        create_audit_log(
            action='po_cancel',
            model_name='PurchaseOrder',
            object_id=self.id,
            user=user,
            object_name=f"Purchase Order {self.po_no}",
            object_reference=self.po_no,
        )

    def close(self, user=None):
        """
        Close a fully received order. Its indent lines are marked received so they
        no longer hold their items; an indent with every line received is deactivated.
        """
        self.is_active = False
        self.save(update_fields=['is_active', 'updated_at'])
        PurchaseIndentItem.objects.filter(po_items__purchase_order=self).update(is_received=True)
        indents = PurchaseIndent.objects.filter(items__po_items__purchase_order=self, is_active=True).distinct()
        for indent in indents:
            if not indent.items.filter(is_received=False).exists():
                indent.deactivate()
        create_audit_log(
            action='po_close',
            model_name='PurchaseOrder',
            object_id=self.id,
            user=user,
            object_name=f"Purchase Order {self.po_no}",
            object_reference=self.po_no,
            changes={'lines': list(self.items.values_list('purchase_indent_item_id', flat=True))},
        )

    def is_fully_received(self):
        """Every line has an inward movement recorded against this order"""
        received = set(self.movements.filter(movement_type='inward').values_list('item_id', flat=True))
        ordered = set(self.items.values_list('purchase_indent_item__item_id', flat=True))
        return bool(ordered) and ordered <= received

    class Meta:
        db_table = 'purchase_orders'
        ordering = ['-created_at']


class PurchaseOrderItem(models.Model):
    """Purchase order line, linked to an indent line rather than to the item directly"""
    purchase_order = models.ForeignKey(PurchaseOrder, on_delete=models.CASCADE, related_name='items')
    purchase_indent_item = models.ForeignKey(PurchaseIndentItem, on_delete=models.PROTECT, related_name='po_items')
    rate = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    def __str__(self):
        return f"{self.purchase_order.po_no} / {self.purchase_indent_item_id}"

    class Meta:
        db_table = 'purchase_order_items'
        ordering = ['id']
