from django.contrib import admin
from .models import Vendor, Asset, DisposalRecord, AuditLog, Notification


@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = ['vendor_name', 'contact_email', 'is_active']
    search_fields = ['vendor_name']


@admin.register(Asset)
class AssetAdmin(admin.ModelAdmin):
    list_display = [
        'asset_id', 'manufacturer', 'model', 'category', 'status',
        'condition', 'purchase_cost', 'purchase_date',
    ]
    list_filter = ['status', 'condition', 'category']
    search_fields = ['asset_id', 'manufacturer', 'model', 'serial_number']
    date_hierarchy = 'purchase_date'


@admin.register(DisposalRecord)
class DisposalRecordAdmin(admin.ModelAdmin):
    list_display = [
        'document_reference', 'asset_identifier', 'disposal_method',
        'disposal_value', 'status', 'disposal_date',
    ]
    list_filter = ['status', 'disposal_method']
    date_hierarchy = 'disposal_date'


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['timestamp', 'action', 'object_repr', 'source', 'user']
    list_filter = ['action', 'source']

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'recipient', 'notification_type', 'priority', 'is_read', 'created_at']
    list_filter = ['notification_type', 'priority', 'is_read']
