from django.conf import settings
from django.db import models
from django.utils import timezone
from backend.catalog.models import Item, HolderType
from backend.locations.models import Location
from backend.parties.models import Party


class Movement(models.Model):
    """Custody movement of an item between locations and parties"""
    TYPE_INWARD = 'inward'
    TYPE_OUTWARD = 'outward'
    TYPE_SYSTEM_RETURN = 'system_return'
    TYPE_CHOICES = [
        (TYPE_INWARD, 'Inward'),
        (TYPE_OUTWARD, 'Outward'),
        (TYPE_SYSTEM_RETURN, 'System Return'),
    ]

    movement_no = models.CharField(max_length=100, unique=True)
    item = models.ForeignKey(Item, on_delete=models.CASCADE, related_name='movements')
    movement_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    from_type = models.CharField(max_length=20, choices=HolderType.choices, default=HolderType.NOT_IN_STOCK)
    from_location = models.ForeignKey(Location, on_delete=models.SET_NULL, null=True, blank=True, related_name='movements_from')
    from_party = models.ForeignKey(Party, on_delete=models.SET_NULL, null=True, blank=True, related_name='movements_from')
    to_type = models.CharField(max_length=20, choices=HolderType.choices)
    to_location = models.ForeignKey(Location, on_delete=models.SET_NULL, null=True, blank=True, related_name='movements_to')
    to_party = models.ForeignKey(Party, on_delete=models.SET_NULL, null=True, blank=True, related_name='movements_to')
    purchase_order = models.ForeignKey('purchasing.PurchaseOrder', on_delete=models.SET_NULL, null=True, blank=True, related_name='movements')
    reason = models.CharField(max_length=255, blank=True)
    remarks = models.TextField(blank=True)
    # QC workflow flags, maintained by the QC step
    is_qc_pending = models.BooleanField(default=False)
    is_qc_approved = models.BooleanField(default=False)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='movements')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.movement_no

    class Meta:
        db_table = 'movements'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['item', 'is_qc_pending'], name='idx_movement_item_qc'),
        ]


class QualityControl(models.Model):
    """QC decision recorded against a pending movement (one per movement)"""
    movement = models.OneToOneField(Movement, on_delete=models.CASCADE, related_name='quality_control')
    is_approved = models.BooleanField(default=False)
    remarks = models.TextField(blank=True)
    checked_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='quality_controls')
    checked_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return f"QC {self.movement.movement_no} ({'approved' if self.is_approved else 'rejected'})"

    class Meta:
        db_table = 'quality_controls'
        ordering = ['-checked_at']


class JobWork(models.Model):
    """Outsourced processing assignment for an item"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('in_progress', 'In Progress'),
        ('completed', 'Completed'),
    ]

    job_work_no = models.CharField(max_length=100, unique=True)
    item = models.ForeignKey(Item, on_delete=models.CASCADE, related_name='job_works')
    party = models.ForeignKey(Party, on_delete=models.SET_NULL, null=True, blank=True, related_name='job_works')
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='job_works')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.job_work_no

    class Meta:
        db_table = 'job_works'
        ordering = ['-created_at']


class Outward(models.Model):
    """Outward dispatch of in-stock items to a party"""
    outward_no = models.CharField(max_length=100, unique=True)
    outward_date = models.DateField(default=timezone.localdate)
    party = models.ForeignKey(Party, on_delete=models.PROTECT, related_name='outwards')
    remarks = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='outwards')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.outward_no

    class Meta:
        db_table = 'outwards'
        ordering = ['-outward_date', '-created_at']


class OutwardLine(models.Model):
    """Outward line items"""
    outward = models.ForeignKey(Outward, on_delete=models.CASCADE, related_name='lines')
    item = models.ForeignKey(Item, on_delete=models.PROTECT, related_name='outward_lines')
    quantity = models.PositiveIntegerField(default=1)
    remarks = models.TextField(blank=True)

    class Meta:
        db_table = 'outward_lines'
        ordering = ['id']
