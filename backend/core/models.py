from django.conf import settings
from django.db import models


class AuditLog(models.Model):
    """Audit log for pipeline operations on items"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('indent_create', 'Purchase Indent Created'),
        ('indent_update', 'Purchase Indent Updated'),
        ('indent_approve', 'Purchase Indent Approved'),
        ('indent_reject', 'Purchase Indent Rejected'),
        ('po_create', 'Purchase Order Created'),
        ('po_cancel', 'Purchase Order Cancelled'),
        ('po_close', 'Purchase Order Closed'),
        ('inward', 'Inward Received'),
        ('qc_approve', 'QC Approved'),
        ('qc_reject', 'QC Rejected'),
        ('jobwork_create', 'Job Work Created'),
        ('outward', 'Outward Dispatched'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., item name, indent number)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., PI number, PO number, outward number)")
    changes = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.action} {self.model_name}#{self.object_id}"

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='idx_audit_created'),
            models.Index(fields=['action'], name='idx_audit_action'),
            models.Index(fields=['model_name'], name='idx_audit_model_name'),
            models.Index(fields=['object_reference'], name='idx_audit_object_ref'),
        ]
