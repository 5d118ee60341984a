from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


HOLDER_TYPE_CHOICES = [('NotInStock', 'Not in stock'), ('Vendor', 'Vendor'), ('Location', 'Location')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('catalog', '0001_initial'),
        ('locations', '0001_initial'),
        ('parties', '0001_initial'),
        ('purchasing', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Movement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('movement_no', models.CharField(max_length=100, unique=True)),
                ('movement_type', models.CharField(choices=[('inward', 'Inward'), ('outward', 'Outward'), ('system_return', 'System Return')], max_length=20)),
                ('from_type', models.CharField(choices=HOLDER_TYPE_CHOICES, default='NotInStock', max_length=20)),
                ('to_type', models.CharField(choices=HOLDER_TYPE_CHOICES, max_length=20)),
                ('reason', models.CharField(blank=True, max_length=255)),
                ('remarks', models.TextField(blank=True)),
                ('is_qc_pending', models.BooleanField(default=False)),
                ('is_qc_approved', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='movements', to=settings.AUTH_USER_MODEL)),
                ('from_location', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='movements_from', to='locations.location')),
                ('from_party', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='movements_from', to='parties.party')),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='movements', to='catalog.item')),
                ('purchase_order', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='movements', to='purchasing.purchaseorder')),
                ('to_location', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='movements_to', to='locations.location')),
                ('to_party', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='movements_to', to='parties.party')),
            ],
            options={
                'db_table': 'movements',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['item', 'is_qc_pending'], name='idx_movement_item_qc')],
            },
        ),
        migrations.CreateModel(
            name='QualityControl',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_approved', models.BooleanField(default=False)),
                ('remarks', models.TextField(blank=True)),
                ('checked_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('checked_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='quality_controls', to=settings.AUTH_USER_MODEL)),
                ('movement', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='quality_control', to='inventory.movement')),
            ],
            options={
                'db_table': 'quality_controls',
                'ordering': ['-checked_at'],
            },
        ),
        migrations.CreateModel(
            name='JobWork',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('job_work_no', models.CharField(max_length=100, unique=True)),
                ('description', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in_progress', 'In Progress'), ('completed', 'Completed')], default='pending', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='job_works', to=settings.AUTH_USER_MODEL)),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='job_works', to='catalog.item')),
                ('party', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='job_works', to='parties.party')),
            ],
            options={
                'db_table': 'job_works',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Outward',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('outward_no', models.CharField(max_length=100, unique=True)),
                ('outward_date', models.DateField(default=django.utils.timezone.localdate)),
                ('remarks', models.TextField(blank=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='outwards', to=settings.AUTH_USER_MODEL)),
                ('party', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='outwards', to='parties.party')),
            ],
            options={
                'db_table': 'outwards',
                'ordering': ['-outward_date', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='OutwardLine',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('remarks', models.TextField(blank=True)),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='outward_lines', to='catalog.item')),
                ('outward', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lines', to='inventory.outward')),
            ],
            options={
                'db_table': 'outward_lines',
                'ordering': ['id'],
            },
        ),
    ]
