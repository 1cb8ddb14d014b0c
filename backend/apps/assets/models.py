import uuid

from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.utils import timezone
from decimal import Decimal


class Vendor(models.Model):
    """Supplier of an asset. Referenced weakly from Asset."""
    vendor_name = models.CharField('Name', max_length=255, unique=True)
    contact_email = models.EmailField('Contact email', blank=True)
    is_active = models.BooleanField('Active', default=True)

    class Meta:
        verbose_name = 'Vendor'
        verbose_name_plural = 'Vendors'
        ordering = ['vendor_name']

    def __str__(self):
        return self.vendor_name


class Asset(models.Model):
    """Registered IT / enterprise asset."""

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        AVAILABLE = 'available', 'Available'
        UNDER_MAINTENANCE = 'under_maintenance', 'Under Maintenance'
        DAMAGED = 'damaged', 'Damaged'
        READY_FOR_SCRAP = 'ready_for_scrap', 'Ready for Scrap'
        DISPOSED = 'disposed', 'Disposed'

    class Condition(models.TextChoices):
        EXCELLENT = 'excellent', 'Excellent'
        GOOD = 'good', 'Good'
        FAIR = 'fair', 'Fair'
        POOR = 'poor', 'Poor'
        DAMAGED = 'damaged', 'Damaged'
        BEYOND_REPAIR = 'beyond_repair', 'Beyond Repair'
        OBSOLETE = 'obsolete', 'Obsolete'

    asset_id = models.CharField('Asset ID', max_length=50, unique=True)
    manufacturer = models.CharField('Manufacturer', max_length=255, blank=True)
    model = models.CharField('Model', max_length=255, blank=True)
    category = models.CharField('Category', max_length=100, blank=True)
    serial_number = models.CharField('Serial number', max_length=100, blank=True)

    status = models.CharField(
        'Status',
        max_length=20,
        choices=Status.choices,
        default=Status.AVAILABLE,
    )
    condition = models.CharField(
        'Condition',
        max_length=20,
        choices=Condition.choices,
        default=Condition.GOOD,
    )

    purchase_date = models.DateField('Purchase date', null=True, blank=True)
    purchase_cost = models.DecimalField(
        'Purchase cost',
        max_digits=15,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))],
    )
    last_audit_date = models.DateField('Last audit date', null=True, blank=True)
    last_maintenance_date = models.DateField('Last maintenance date', null=True, blank=True)
    notes = models.TextField('Notes', blank=True)

    assigned_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_assets',
        verbose_name='Assigned to',
    )
    vendor = models.ForeignKey(
        Vendor,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assets',
        verbose_name='Vendor',
    )

    created_at = models.DateTimeField('Created', auto_now_add=True)
    updated_at = models.DateTimeField('Updated', auto_now=True)

    class Meta:
        verbose_name = 'Asset'
        verbose_name_plural = 'Assets'
        ordering = ['asset_id']

    def __str__(self):
        return f'{self.asset_id} — {self.display_name}'

    @property
    def display_name(self):
        return ' '.join(p for p in [self.manufacturer, self.model] if p) or self.asset_id

    def append_note(self, line):
        """Append a line to the notes log, keeping earlier annotations."""
        self.notes = f'{self.notes}\n{line}'.strip() if self.notes else line


def generate_document_reference():
    return f'DOC-{timezone.now().year}-{uuid.uuid4().hex[:10].upper()}'


class DisposalRecord(models.Model):
    """Disposal / dead-stock event for an asset."""

    class Method(models.TextChoices):
        AUCTION = 'Auction', 'Auction'
        SCRAP = 'Scrap', 'Scrap'
        DONATION = 'Donation', 'Donation'
        RECYCLING = 'Recycling', 'Recycling'
        SALE = 'Sale', 'Sale'
        OTHER = 'Other', 'Other'

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        IN_PROGRESS = 'in_progress', 'In progress'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    SYSTEM_APPROVER = 'SYSTEM'
    SYSTEM_AUTO_APPROVER = 'SYSTEM-AUTO'

    # Copy of Asset.asset_id; survives renames and deletions of the asset.
    asset_identifier = models.CharField('Asset ID', max_length=50, db_index=True)
    asset_name = models.CharField('Asset name', max_length=500)
    category = models.CharField('Category', max_length=100, blank=True)
    disposal_date = models.DateField('Disposal date', default=timezone.localdate)
    disposal_method = models.CharField(
        'Disposal method', max_length=20, choices=Method.choices,
    )
    disposal_value = models.DecimalField(
        'Disposal value',
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
    )
    approved_by = models.CharField('Approved by', max_length=50, default=SYSTEM_APPROVER)
    approved_at = models.DateTimeField('Approved at', null=True, blank=True)
    status = models.CharField(
        'Status', max_length=20, choices=Status.choices, default=Status.PENDING,
    )
    remarks = models.TextField('Remarks', blank=True)
    document_reference = models.CharField(
        'Document reference',
        max_length=120,
        unique=True,
        default=generate_document_reference,
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        verbose_name='Created by',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Disposal record'
        verbose_name_plural = 'Disposal records'
        ordering = ['-disposal_date', '-created_at']
        indexes = [
            models.Index(fields=['asset_identifier', '-disposal_date'], name='disposal_asset_date_idx'),
            models.Index(fields=['status'], name='disposal_status_idx'),
        ]

    def __str__(self):
        return f'{self.document_reference} — {self.asset_identifier}'

    @property
    def is_auto_approved(self):
        return self.approved_by == self.SYSTEM_AUTO_APPROVER


class AuditLog(models.Model):
    """Append-only audit trail of automated and manual actions."""

    class Action(models.TextChoices):
        CREATE = 'create', 'Create'
        UPDATE = 'update', 'Update'
        DISPOSAL_MARK = 'automated_disposal_mark', 'Automated disposal marking'
        MOVE_TO_DEAD_STOCK = 'auto_move_to_dead_stock', 'Moved to dead stock'
        MOVE_TO_DISPOSAL = 'auto_move_to_disposal', 'Moved to disposal'

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
        null=True, blank=True, verbose_name='User',
    )
    action = models.CharField('Action', max_length=40, choices=Action.choices)
    content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE)
    object_id = models.PositiveBigIntegerField()
    content_object = GenericForeignKey('content_type', 'object_id')
    object_repr = models.CharField('Object', max_length=500)

    description = models.TextField('Description', blank=True)
    changes = models.JSONField('Changes', default=dict, blank=True)
    source = models.CharField('Source', max_length=50, blank=True)
    timestamp = models.DateTimeField('Time', auto_now_add=True)

    class Meta:
        verbose_name = 'Audit entry'
        verbose_name_plural = 'Audit log'
        ordering = ['-timestamp']

    def __str__(self):
        return f'{self.timestamp} | {self.user or self.source} | {self.get_action_display()} | {self.object_repr}'


class Notification(models.Model):
    """In-app notification for a user."""

    class NotificationType(models.TextChoices):
        DISPOSAL_MARKED = 'disposal_marked', 'Asset marked for disposal'
        DEAD_STOCK = 'dead_stock', 'Asset moved to dead stock'
        DISPOSED = 'disposed', 'Asset moved to disposal'
        AUTOMATION_SUMMARY = 'automation_summary', 'Automation summary'

    class Priority(models.TextChoices):
        LOW = 'low', 'Low'
        MEDIUM = 'medium', 'Medium'
        HIGH = 'high', 'High'
        URGENT = 'urgent', 'Urgent'

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE,
        related_name='notifications', verbose_name='Recipient',
    )
    notification_type = models.CharField(
        'Type', max_length=30, choices=NotificationType.choices
    )
    title = models.CharField('Title', max_length=255)
    message = models.TextField('Message')
    priority = models.CharField(
        'Priority', max_length=10, choices=Priority.choices, default=Priority.MEDIUM,
    )
    action_url = models.CharField('Action URL', max_length=255, blank=True)
    data = models.JSONField('Data', default=dict, blank=True)
    asset = models.ForeignKey(
        Asset, on_delete=models.CASCADE, null=True, blank=True,
        verbose_name='Related asset',
    )
    is_read = models.BooleanField('Read', default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Notification'
        verbose_name_plural = 'Notifications'
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.title} → {self.recipient}'
