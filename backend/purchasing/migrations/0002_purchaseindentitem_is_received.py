from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('purchasing', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='purchaseindentitem',
            name='is_received',
            field=models.BooleanField(default=False),
        ),
    ]
