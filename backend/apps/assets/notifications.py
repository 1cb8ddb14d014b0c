"""
Notification helpers shared by the automation passes.

Notifications for an asset transition are collected in a NotificationBuffer
and written in one bulk insert inside the transition's transaction.
"""
from django.contrib.auth import get_user_model

from .models import Notification

User = get_user_model()


def get_recipients(roles, exclude_user=None):
    """Active users with one of the given roles."""
    qs = User.objects.filter(role__in=roles, is_active=True).order_by('pk')
    if exclude_user:
        qs = qs.exclude(pk=exclude_user.pk)
    return list(qs)


class NotificationBuffer:
    """Pending notification rows written together by ``flush``."""

    def __init__(self):
        self._pending = []

    def __len__(self):
        return len(self._pending)

    def add(self, recipients, notification_type, title, message, asset=None,
            priority=Notification.Priority.MEDIUM, action_url='', data=None):
        for user in recipients:
            self._pending.append(Notification(
                recipient=user,
                notification_type=notification_type,
                title=title,
                message=message,
                asset=asset,
                priority=priority,
                action_url=action_url,
                data=data or {},
            ))

    def flush(self):
        """Insert buffered rows; returns how many were written."""
        if not self._pending:
            return 0
        created = Notification.objects.bulk_create(self._pending)
        self._pending = []
        return len(created)


def notify(recipients, notification_type, title, message, asset=None, **kwargs):
    """Create notifications for a list of recipients right away."""
    buffer = NotificationBuffer()
    buffer.add(recipients, notification_type, title, message, asset=asset, **kwargs)
    return buffer.flush()
