from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('create', 'Create'), ('update', 'Update'), ('delete', 'Delete'), ('indent_create', 'Purchase Indent Created'), ('indent_update', 'Purchase Indent Updated'), ('indent_approve', 'Purchase Indent Approved'), ('indent_reject', 'Purchase Indent Rejected'), ('po_create', 'Purchase Order Created'), ('po_cancel', 'Purchase Order Cancelled'), ('inward', 'Inward Received'), ('qc_approve', 'QC Approved'), ('qc_reject', 'QC Rejected'), ('jobwork_create', 'Job Work Created'), ('outward', 'Outward Dispatched')], max_length=50)),
                ('model_name', models.CharField(max_length=100)),
                ('object_id', models.CharField(max_length=100)),
                ('object_name', models.CharField(blank=True, help_text='Human-readable name of the object (e.g., item name, indent number)', max_length=255, null=True)),
                ('object_reference', models.CharField(blank=True, help_text='Reference identifier (e.g., PI number, PO number, outward number)', max_length=255, null=True)),
                ('changes', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'audit_logs',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['-created_at'], name='idx_audit_created'), models.Index(fields=['action'], name='idx_audit_action'), models.Index(fields=['model_name'], name='idx_audit_model_name'), models.Index(fields=['object_reference'], name='idx_audit_object_ref')],
            },
        ),
    ]
