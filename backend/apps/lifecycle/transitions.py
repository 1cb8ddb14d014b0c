"""
Transition executor.

Applies one pass to one asset: status change, disposal record, audit entry
and notifications commit together or not at all.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional

from django.db import transaction
from django.utils import timezone

from apps.assets.audit import log_action
from apps.assets.models import Asset, DisposalRecord
from apps.assets.notifications import NotificationBuffer, get_recipients

from .rules import evaluate, render_reason

logger = logging.getLogger(__name__)

ASSET_FIELDS = ['status', 'condition', 'notes', 'last_audit_date', 'updated_at']


@dataclass
class TransitionResult:
    asset_id: str
    old_status: str
    new_status: str
    reason: str
    rules: list = field(default_factory=list)
    disposal_record_id: Optional[int] = None
    notified: int = 0

    def as_dict(self):
        return {
            'asset_id': self.asset_id,
            'old_status': self.old_status,
            'new_status': self.new_status,
            'reason': self.reason,
            'disposal_record_id': self.disposal_record_id,
        }


def execute_transition(automation_pass, asset, rules, now=None):
    """
    Move ``asset`` to the pass's target status.

    The row is re-read under ``select_for_update`` and the reason is
    recomputed from the locked state. Any exception rolls back every write
    made for this asset and is re-raised.
    """
    now = now or timezone.now()
    today = timezone.localdate(now)

    with transaction.atomic():
        locked = Asset.objects.select_for_update().get(pk=asset.pk)
        triggered = evaluate(automation_pass.criteria(rules), locked, today)
        reason = render_reason(triggered)
        old_status = locked.status

        outcome = automation_pass.apply(locked, rules, reason, today, now)
        locked.save(update_fields=ASSET_FIELDS)

        record = None
        if outcome.disposal is not None:
            record = DisposalRecord.objects.create(
                asset_identifier=locked.asset_id,
                asset_name=locked.display_name,
                category=locked.category,
                disposal_date=today,
                **outcome.disposal,
            )

        changes = {
            'old_status': old_status,
            'new_status': locked.status,
            'reason': reason,
            'rules': [rule.as_dict() for rule in triggered],
            **outcome.changes,
        }
        if record is not None:
            changes['disposal_record_id'] = record.pk
        log_action(
            None,
            automation_pass.audit_action,
            locked,
            changes=changes,
            description=outcome.description,
            source=automation_pass.audit_source,
        )

        data = {'asset_id': locked.asset_id, **outcome.data}
        if record is not None:
            data['disposal_record_id'] = record.pk
        buffer = NotificationBuffer()
        buffer.add(
            get_recipients(rules.notify_roles),
            automation_pass.notification_type,
            outcome.title,
            outcome.message,
            asset=locked,
            priority=outcome.priority,
            action_url=outcome.action_url,
            data=data,
        )
        notified = buffer.flush()

    logger.info(
        '%s: %s %s -> %s (%s)',
        automation_pass.name, locked.asset_id, old_status, locked.status, reason,
    )
    return TransitionResult(
        asset_id=locked.asset_id,
        old_status=old_status,
        new_status=locked.status,
        reason=reason,
        rules=triggered,
        disposal_record_id=record.pk if record is not None else None,
        notified=notified,
    )
