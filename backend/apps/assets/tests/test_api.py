import pytest

from apps.assets.audit import log_action
from apps.assets.models import AuditLog, Notification
from apps.assets.notifications import NotificationBuffer, get_recipients, notify

pytestmark = pytest.mark.django_db


def test_recipients_are_active_users_with_role(staff):
    recipients = get_recipients(['admin', 'it_manager'])

    assert [u.username for u in recipients] == ['admin', 'it']


def test_buffer_writes_on_flush(staff, make_asset):
    asset = make_asset()
    buffer = NotificationBuffer()
    buffer.add([staff['admin'], staff['it_manager']], Notification.NotificationType.DEAD_STOCK,
               'Moved', 'Asset moved', asset=asset)

    assert len(buffer) == 2
    assert Notification.objects.count() == 0
    assert buffer.flush() == 2
    assert Notification.objects.filter(asset=asset).count() == 2
    assert buffer.flush() == 0


def test_audit_entry_references_instance(make_asset):
    asset = make_asset()

    entry = log_action(None, AuditLog.Action.UPDATE, asset, changes={'status': 'active'}, source='test')

    assert entry.content_object == asset
    assert entry.object_repr.startswith(asset.asset_id)


class TestNotificationEndpoints:

    def test_only_own_notifications(self, admin_client, staff):
        notify([staff['admin']], Notification.NotificationType.AUTOMATION_SUMMARY, 'Done', 'Run done')
        notify([staff['it_manager']], Notification.NotificationType.AUTOMATION_SUMMARY, 'Done', 'Run done')

        response = admin_client.get('/api/assets/notifications/')

        assert response.status_code == 200
        assert response.data['count'] == 1

    def test_unread_count_and_mark_read(self, admin_client, staff):
        notify([staff['admin']], Notification.NotificationType.AUTOMATION_SUMMARY, 'One', 'First')
        notify([staff['admin']], Notification.NotificationType.AUTOMATION_SUMMARY, 'Two', 'Second')
        first = Notification.objects.filter(title='One').get()

        assert admin_client.get('/api/assets/notifications/unread_count/').data == {'count': 2}
        admin_client.post(f'/api/assets/notifications/{first.pk}/mark_read/')
        assert admin_client.get('/api/assets/notifications/unread_count/').data == {'count': 1}
        admin_client.post('/api/assets/notifications/mark_all_read/')
        assert admin_client.get('/api/assets/notifications/unread_count/').data == {'count': 0}


def test_audit_log_is_read_only(admin_client, make_asset):
    log_action(None, AuditLog.Action.UPDATE, make_asset())

    assert admin_client.get('/api/assets/audit-log/').data['count'] == 1
    assert admin_client.delete(f'/api/assets/audit-log/{AuditLog.objects.get().pk}/').status_code == 405


def test_employee_cannot_read_disposal_records(api_client, make_user):
    api_client.force_authenticate(make_user('employee'))

    assert api_client.get('/api/assets/disposal-records/').status_code == 403
