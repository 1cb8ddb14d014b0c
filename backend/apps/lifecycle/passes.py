"""
Automation passes.

A pass names its source statuses, target status and criteria, and knows how
to apply a transition to a locked asset row. The transition executor drives
the common part (locking, saving, audit, notifications).
"""
from dataclasses import dataclass, field
from typing import Optional

from apps.assets.models import Asset, AuditLog, DisposalRecord, Notification

from .config import PASS_DEAD_STOCK, PASS_DISPOSAL, PASS_DISPOSAL_MARKING
from .exceptions import UnknownJob
from .rules import (
    AgeCriterion, AuditRecencyCriterion, ConditionCriterion,
    DeadStockDurationCriterion, DepreciationCriterion,
    MaintenanceRecencyCriterion,
)
from .valuation import (
    condition_disposal_value, days_between, depreciation_percent,
    disposal_method, flat_disposal_value, round_currency,
)


def epoch_ms(moment):
    return int(moment.timestamp() * 1000)


def approval(auto_approve, now):
    """approved_by / approved_at / status for an automated disposal record."""
    if auto_approve:
        return {
            'approved_by': DisposalRecord.SYSTEM_AUTO_APPROVER,
            'approved_at': now,
            'status': DisposalRecord.Status.COMPLETED,
        }
    return {
        'approved_by': DisposalRecord.SYSTEM_APPROVER,
        'approved_at': None,
        'status': DisposalRecord.Status.PENDING,
    }


@dataclass
class Outcome:
    """What a pass decided for one asset, before anything is written."""
    changes: dict
    description: str
    title: str
    message: str
    priority: str = Notification.Priority.MEDIUM
    action_url: str = ''
    data: dict = field(default_factory=dict)
    disposal: Optional[dict] = None


class AutomationPass:
    name = ''
    source_statuses = ()
    target_status = ''
    audit_action = ''
    audit_source = 'system-automation'
    notification_type = ''

    def criteria(self, rules):
        raise NotImplementedError

    def apply(self, asset, rules, reason, today, now):
        """Mutate the locked asset in memory and describe the outcome."""
        raise NotImplementedError

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.name}>'


class DisposalMarkingPass(AutomationPass):
    """In-service assets that meet any disposal criterion become Ready for Scrap."""
    name = PASS_DISPOSAL_MARKING
    source_statuses = (
        Asset.Status.ACTIVE,
        Asset.Status.AVAILABLE,
        Asset.Status.UNDER_MAINTENANCE,
        Asset.Status.DAMAGED,
    )
    target_status = Asset.Status.READY_FOR_SCRAP
    audit_action = AuditLog.Action.DISPOSAL_MARK
    notification_type = Notification.NotificationType.DISPOSAL_MARKED

    def criteria(self, rules):
        return [
            ConditionCriterion(rules.auto_mark_conditions),
            DepreciationCriterion(
                rules.max_depreciation_percent,
                rules.depreciation_rate_per_year,
                min_purchase_cost=rules.min_purchase_cost_for_check,
            ),
            AgeCriterion(rules.max_age_years, min_purchase_cost=rules.min_purchase_cost_for_check),
            AuditRecencyCriterion(rules.min_days_since_last_use),
        ]

    def apply(self, asset, rules, reason, today, now):
        percent = depreciation_percent(asset, today, rules.depreciation_rate_per_year)
        value = flat_disposal_value(asset, percent)

        if asset.condition in (Asset.Condition.EXCELLENT, Asset.Condition.GOOD):
            asset.condition = Asset.Condition.OBSOLETE
        asset.status = self.target_status
        asset.append_note(f'[AUTO] Marked for disposal on {today.isoformat()}: {reason}')

        return Outcome(
            changes={
                'depreciation_percent': int(round_currency(percent)),
                'disposal_value': int(value),
            },
            description=f'Asset automatically marked for disposal. Reason: {reason}',
            title='Asset auto-marked for disposal',
            message=(
                f'Asset "{asset.display_name}" ({asset.asset_id}) has been '
                f'automatically marked for disposal. Reason: {reason}'
            ),
            action_url='/inventory/dead-stock',
            data={'automation_type': self.name, 'reason': reason},
            disposal={
                'disposal_method': DisposalRecord.Method.SCRAP,
                'disposal_value': value,
                'remarks': f'Automated disposal marking: {reason}',
                'document_reference': f'AUTO-{epoch_ms(now)}-{asset.asset_id}',
                **approval(rules.auto_approve, now),
            },
        )


class DeadStockPass(AutomationPass):
    """Lifecycle stage 1: old, worn or unmaintained assets move to dead stock."""
    name = PASS_DEAD_STOCK
    source_statuses = (
        Asset.Status.ACTIVE,
        Asset.Status.AVAILABLE,
        Asset.Status.UNDER_MAINTENANCE,
    )
    target_status = Asset.Status.READY_FOR_SCRAP
    audit_action = AuditLog.Action.MOVE_TO_DEAD_STOCK
    audit_source = 'system-lifecycle'
    notification_type = Notification.NotificationType.DEAD_STOCK

    def criteria(self, rules):
        return [
            AgeCriterion(rules.max_age_years),
            ConditionCriterion(rules.damage_conditions, min_age_years=rules.poor_condition_age_years),
            MaintenanceRecencyCriterion(rules.no_maintenance_months, rules.stale_maintenance_conditions),
        ]

    def apply(self, asset, rules, reason, today, now):
        if asset.condition not in rules.damage_conditions:
            if Asset.Condition.POOR in rules.damage_conditions:
                asset.condition = Asset.Condition.POOR
            else:
                asset.condition = rules.damage_conditions[0]
        asset.status = self.target_status
        # Start of the dead-stock period for the disposal stage.
        asset.last_audit_date = today
        asset.append_note(f'[AUTO-DEAD-STOCK] {today.isoformat()}: {reason}')

        return Outcome(
            changes={'automation': 'lifecycle'},
            description=f'Asset automatically moved to dead stock. Reason: {reason}',
            title='Asset moved to dead stock',
            message=(
                f'Asset "{asset.display_name}" ({asset.asset_id}) was moved to '
                f'dead stock. Reason: {reason}'
            ),
            action_url='/inventory/dead-stock',
            data={'automation_type': 'lifecycle', 'stage': self.name, 'reason': reason},
        )


class DisposalPass(AutomationPass):
    """Lifecycle stage 2: assets left in dead stock long enough are disposed."""
    name = PASS_DISPOSAL
    source_statuses = (Asset.Status.READY_FOR_SCRAP,)
    target_status = Asset.Status.DISPOSED
    audit_action = AuditLog.Action.MOVE_TO_DISPOSAL
    audit_source = 'system-lifecycle'
    notification_type = Notification.NotificationType.DISPOSED

    def criteria(self, rules):
        return [DeadStockDurationCriterion(rules.days_in_dead_stock)]

    def apply(self, asset, rules, reason, today, now):
        days = days_between(asset.last_audit_date, today)
        if days is None:
            days = rules.days_in_dead_stock
        method = disposal_method(asset).value
        percent = depreciation_percent(asset, today, rules.depreciation_rate_per_year)
        value = condition_disposal_value(asset, percent, rules.condition_multipliers)

        asset.status = self.target_status
        asset.append_note(f'[AUTO-DISPOSAL] {today.isoformat()}: {method} - {value}')

        return Outcome(
            changes={
                'disposal_method': method,
                'disposal_value': int(value),
                'depreciation_percent': int(round_currency(percent)),
                'days_in_dead_stock': days,
            },
            description=f'Asset automatically moved to disposal ({method}). Reason: {reason}',
            title='Asset moved to disposal',
            message=(
                f'Asset "{asset.display_name}" ({asset.asset_id}) was moved to '
                f'disposal after {days} days in dead stock. Method: {method}, '
                f'estimated value: {value}'
            ),
            priority=Notification.Priority.HIGH,
            action_url='/inventory/disposal-records',
            data={'automation_type': 'lifecycle', 'stage': self.name, 'disposal_method': method},
            disposal={
                'disposal_method': method,
                'disposal_value': value,
                'remarks': (
                    f'Automated disposal after {days} days in dead stock. '
                    f'Condition: {asset.get_condition_display()}'
                ),
                'document_reference': f'AUTO-DISP-{epoch_ms(now)}-{asset.asset_id}',
                **approval(rules.auto_approve, now),
            },
        )


PASSES = {
    p.name: p for p in (DisposalMarkingPass(), DeadStockPass(), DisposalPass())
}


def get_pass(name):
    try:
        return PASSES[name]
    except KeyError:
        raise UnknownJob(f'Unknown automation pass "{name}"') from None
