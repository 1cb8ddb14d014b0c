"""Utility module for audit logging."""

import logging

from django.contrib.contenttypes.models import ContentType

from apps.assets.models import AuditLog

logger = logging.getLogger(__name__)


def log_action(user, action, instance, changes=None, description='', source=''):
    """Create an AuditLog entry for the given action on a model instance.

    Errors propagate to the caller so that an entry can never be lost
    silently inside a transaction that documents a state change.

    Args:
        user: The user performing the action, or None for the system.
        action: One of the AuditLog.Action values.
        instance: The model instance being acted upon.
        changes: Optional dict describing the changes made.
        description: Human readable summary.
        source: Origin of the action for system entries
                (e.g. ``system-automation``).

    Returns:
        The created AuditLog instance.
    """
    content_type = ContentType.objects.get_for_model(instance)
    entry = AuditLog.objects.create(
        user=user,
        action=action,
        content_type=content_type,
        object_id=instance.pk,
        object_repr=str(instance)[:500],
        description=description,
        changes=changes or {},
        source=source,
    )
    logger.debug('Audit %s recorded for %s', action, entry.object_repr)
    return entry
