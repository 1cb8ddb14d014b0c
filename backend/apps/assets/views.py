from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from apps.accounts.permissions import IsManagerOrAdmin
from .models import Asset, DisposalRecord, AuditLog, Notification
from .serializers import (
    AssetListSerializer, DisposalRecordSerializer,
    AuditLogSerializer, NotificationSerializer,
)


class AssetViewSet(viewsets.ReadOnlyModelViewSet):
    """Asset registry (read only; registration happens elsewhere)."""
    queryset = Asset.objects.select_related('vendor', 'assigned_user')
    serializer_class = AssetListSerializer
    permission_classes = [IsManagerOrAdmin]
    filterset_fields = ['status', 'condition', 'category', 'vendor']
    search_fields = ['asset_id', 'manufacturer', 'model', 'serial_number']
    ordering_fields = ['asset_id', 'purchase_date', 'purchase_cost']


class DisposalRecordViewSet(viewsets.ReadOnlyModelViewSet):
    """Disposal records produced by the automation."""
    queryset = DisposalRecord.objects.all()
    serializer_class = DisposalRecordSerializer
    permission_classes = [IsManagerOrAdmin]
    filterset_fields = ['status', 'disposal_method', 'asset_identifier']
    search_fields = ['asset_identifier', 'asset_name', 'document_reference']
    ordering_fields = ['disposal_date', 'disposal_value']


class AuditLogViewSet(viewsets.ReadOnlyModelViewSet):
    """Audit log (read only)."""
    queryset = AuditLog.objects.select_related('user', 'content_type')
    serializer_class = AuditLogSerializer
    permission_classes = [IsManagerOrAdmin]
    filterset_fields = ['action', 'user', 'source']
    search_fields = ['object_repr', 'description']
    ordering_fields = ['timestamp']


class NotificationViewSet(viewsets.ModelViewSet):
    """Notifications of the current user."""
    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ['get', 'post', 'delete', 'head', 'options']

    def get_queryset(self):
        return Notification.objects.filter(recipient=self.request.user)

    @action(detail=False, methods=['get'])
    def unread_count(self, request):
        count = self.get_queryset().filter(is_read=False).count()
        return Response({'count': count})

    @action(detail=True, methods=['post'])
    def mark_read(self, request, pk=None):
        notification = self.get_object()
        notification.is_read = True
        notification.save(update_fields=['is_read'])
        return Response({'status': 'ok'})

    @action(detail=False, methods=['post'])
    def mark_all_read(self, request):
        self.get_queryset().filter(is_read=False).update(is_read=True)
        return Response({'status': 'ok'})
