from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='auditlog',
            name='action',
            field=models.CharField(choices=[('create', 'Create'), ('update', 'Update'), ('delete', 'Delete'), ('indent_create', 'Purchase Indent Created'), ('indent_update', 'Purchase Indent Updated'), ('indent_approve', 'Purchase Indent Approved'), ('indent_reject', 'Purchase Indent Rejected'), ('po_create', 'Purchase Order Created'), ('po_cancel', 'Purchase Order Cancelled'), ('po_close', 'Purchase Order Closed'), ('inward', 'Inward Received'), ('qc_approve', 'QC Approved'), ('qc_reject', 'QC Rejected'), ('jobwork_create', 'Job Work Created'), ('outward', 'Outward Dispatched')], max_length=50),
        ),
    ]
