from rest_framework import serializers
from .models import Asset, DisposalRecord, AuditLog, Notification


class AssetListSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    condition_display = serializers.CharField(source='get_condition_display', read_only=True)
    vendor_name = serializers.CharField(
        source='vendor.vendor_name', read_only=True, default=''
    )

    class Meta:
        model = Asset
        fields = [
            'id', 'asset_id', 'manufacturer', 'model', 'category',
            'status', 'status_display', 'condition', 'condition_display',
            'purchase_date', 'purchase_cost', 'last_audit_date',
            'last_maintenance_date', 'vendor', 'vendor_name', 'assigned_user',
        ]


class DisposalRecordSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    is_auto_approved = serializers.BooleanField(read_only=True)

    class Meta:
        model = DisposalRecord
        fields = '__all__'
        read_only_fields = [f.name for f in DisposalRecord._meta.fields]


class AuditLogSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(
        source='user.get_full_name', read_only=True, default=''
    )
    action_display = serializers.CharField(
        source='get_action_display', read_only=True
    )
    content_type_name = serializers.CharField(
        source='content_type.model', read_only=True
    )

    class Meta:
        model = AuditLog
        fields = [
            'id', 'user', 'user_name', 'action', 'action_display',
            'content_type', 'content_type_name', 'object_id', 'object_repr',
            'description', 'changes', 'source', 'timestamp',
        ]
        read_only_fields = fields


class NotificationSerializer(serializers.ModelSerializer):
    notification_type_display = serializers.CharField(
        source='get_notification_type_display', read_only=True
    )

    class Meta:
        model = Notification
        fields = '__all__'
        read_only_fields = ['recipient', 'created_at']
