import apps.assets.models
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('contenttypes', '0002_remove_content_type_name'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Vendor',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('vendor_name', models.CharField(max_length=255, unique=True, verbose_name='Name')),
                ('contact_email', models.EmailField(blank=True, max_length=254, verbose_name='Contact email')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
            ],
            options={
                'verbose_name': 'Vendor',
                'verbose_name_plural': 'Vendors',
                'ordering': ['vendor_name'],
            },
        ),
        migrations.CreateModel(
            name='Asset',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('asset_id', models.CharField(max_length=50, unique=True, verbose_name='Asset ID')),
                ('manufacturer', models.CharField(blank=True, max_length=255, verbose_name='Manufacturer')),
                ('model', models.CharField(blank=True, max_length=255, verbose_name='Model')),
                ('category', models.CharField(blank=True, max_length=100, verbose_name='Category')),
                ('serial_number', models.CharField(blank=True, max_length=100, verbose_name='Serial number')),
                ('status', models.CharField(choices=[('active', 'Active'), ('available', 'Available'), ('under_maintenance', 'Under Maintenance'), ('damaged', 'Damaged'), ('ready_for_scrap', 'Ready for Scrap'), ('disposed', 'Disposed')], default='available', max_length=20, verbose_name='Status')),
                ('condition', models.CharField(choices=[('excellent', 'Excellent'), ('good', 'Good'), ('fair', 'Fair'), ('poor', 'Poor'), ('damaged', 'Damaged'), ('beyond_repair', 'Beyond Repair'), ('obsolete', 'Obsolete')], default='good', max_length=20, verbose_name='Condition')),
                ('purchase_date', models.DateField(blank=True, null=True, verbose_name='Purchase date')),
                ('purchase_cost', models.DecimalField(blank=True, decimal_places=2, max_digits=15, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Purchase cost')),
                ('last_audit_date', models.DateField(blank=True, null=True, verbose_name='Last audit date')),
                ('last_maintenance_date', models.DateField(blank=True, null=True, verbose_name='Last maintenance date')),
                ('notes', models.TextField(blank=True, verbose_name='Notes')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated')),
                ('assigned_user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_assets', to=settings.AUTH_USER_MODEL, verbose_name='Assigned to')),
                ('vendor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assets', to='assets.vendor', verbose_name='Vendor')),
            ],
            options={
                'verbose_name': 'Asset',
                'verbose_name_plural': 'Assets',
                'ordering': ['asset_id'],
            },
        ),
        migrations.CreateModel(
            name='DisposalRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('asset_identifier', models.CharField(db_index=True, max_length=50, verbose_name='Asset ID')),
                ('asset_name', models.CharField(max_length=500, verbose_name='Asset name')),
                ('category', models.CharField(blank=True, max_length=100, verbose_name='Category')),
                ('disposal_date', models.DateField(default=django.utils.timezone.localdate, verbose_name='Disposal date')),
                ('disposal_method', models.CharField(choices=[('Auction', 'Auction'), ('Scrap', 'Scrap'), ('Donation', 'Donation'), ('Recycling', 'Recycling'), ('Sale', 'Sale'), ('Other', 'Other')], max_length=20, verbose_name='Disposal method')),
                ('disposal_value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Disposal value')),
                ('approved_by', models.CharField(default='SYSTEM', max_length=50, verbose_name='Approved by')),
                ('approved_at', models.DateTimeField(blank=True, null=True, verbose_name='Approved at')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in_progress', 'In progress'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='pending', max_length=20, verbose_name='Status')),
                ('remarks', models.TextField(blank=True, verbose_name='Remarks')),
                ('document_reference', models.CharField(default=apps.assets.models.generate_document_reference, max_length=120, unique=True, verbose_name='Document reference')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL, verbose_name='Created by')),
            ],
            options={
                'verbose_name': 'Disposal record',
                'verbose_name_plural': 'Disposal records',
                'ordering': ['-disposal_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['asset_identifier', '-disposal_date'], name='disposal_asset_date_idx'),
                    models.Index(fields=['status'], name='disposal_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('create', 'Create'), ('update', 'Update'), ('automated_disposal_mark', 'Automated disposal marking'), ('auto_move_to_dead_stock', 'Moved to dead stock'), ('auto_move_to_disposal', 'Moved to disposal')], max_length=40, verbose_name='Action')),
                ('object_id', models.PositiveBigIntegerField()),
                ('object_repr', models.CharField(max_length=500, verbose_name="Object")),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('changes', models.JSONField(blank=True, default=dict, verbose_name='Changes')),
                ('source', models.CharField(blank=True, max_length=50, verbose_name='Source')),
                ('timestamp', models.DateTimeField(auto_now_add=True, verbose_name='Time')),
                ('content_type', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to='contenttypes.contenttype')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL, verbose_name='User')),
            ],
            options={
                'verbose_name': 'Audit entry',
                'verbose_name_plural': 'Audit log',
                'ordering': ['-timestamp'],
            },
        ),
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('notification_type', models.CharField(choices=[('disposal_marked', 'Asset marked for disposal'), ('dead_stock', 'Asset moved to dead stock'), ('disposed', 'Asset moved to disposal'), ('automation_summary', 'Automation summary')], max_length=30, verbose_name='Type')),
                ('title', models.CharField(max_length=255, verbose_name='Title')),
                ('message', models.TextField(verbose_name='Message')),
                ('priority', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High'), ('urgent', 'Urgent')], default='medium', max_length=10, verbose_name='Priority')),
                ('action_url', models.CharField(blank=True, max_length=255, verbose_name='Action URL')),
                ('data', models.JSONField(blank=True, default=dict, verbose_name='Data')),
                ('is_read', models.BooleanField(default=False, verbose_name='Read')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('asset', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, to='assets.asset', verbose_name='Related asset')),
                ('recipient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL, verbose_name='Recipient')),
            ],
            options={
                'verbose_name': 'Notification',
                'verbose_name_plural': 'Notifications',
                'ordering': ['-created_at'],
            },
        ),
    ]
