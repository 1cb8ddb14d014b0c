from decimal import Decimal
from unittest import mock

import pytest
from dateutil.relativedelta import relativedelta
from django.db import DatabaseError

from apps.assets.models import Asset, AuditLog, DisposalRecord, Notification
from apps.lifecycle.config import (
    PASS_DEAD_STOCK, PASS_DISPOSAL, PASS_DISPOSAL_MARKING, build_rules,
)
from apps.lifecycle.passes import get_pass
from apps.lifecycle.runner import run_pass

pytestmark = pytest.mark.django_db


def recipients_of(notification_type):
    return set(
        Notification.objects
        .filter(notification_type=notification_type)
        .values_list('recipient__username', flat=True)
    )


class TestDisposalMarkingPass:

    def test_old_asset_is_marked(self, make_asset, staff, today):
        asset = make_asset(
            purchase_date=today - relativedelta(years=8),
            purchase_cost=Decimal('2000'),
            condition=Asset.Condition.GOOD,
        )

        summary = run_pass(get_pass(PASS_DISPOSAL_MARKING))

        assert (summary.ok, summary.processed, summary.success, summary.failed) == (True, 1, 1, 0)
        asset.refresh_from_db()
        assert asset.status == Asset.Status.READY_FOR_SCRAP
        assert asset.condition == Asset.Condition.OBSOLETE
        assert '[AUTO] Marked for disposal' in asset.notes

        record = DisposalRecord.objects.get()
        assert record.asset_identifier == asset.asset_id
        assert record.disposal_value == Decimal('40')
        assert record.disposal_method == DisposalRecord.Method.SCRAP
        assert record.approved_by == DisposalRecord.SYSTEM_APPROVER
        assert record.status == DisposalRecord.Status.PENDING
        assert record.approved_at is None
        assert record.document_reference.startswith('AUTO-')
        assert record.document_reference.endswith(f'-{asset.asset_id}')
        assert record.remarks == 'Automated disposal marking: Age: 8.0 years'

        entry = AuditLog.objects.get()
        assert entry.action == AuditLog.Action.DISPOSAL_MARK
        assert entry.source == 'system-automation'
        assert entry.user is None
        assert entry.content_object == asset
        assert entry.changes['old_status'] == 'active'
        assert entry.changes['new_status'] == 'ready_for_scrap'
        assert entry.changes['depreciation_percent'] == 80
        assert entry.changes['disposal_value'] == 40
        assert entry.changes['rules'] == [{'rule': 'Age', 'value': '8.0 years'}]

    def test_asset_without_purchase_data(self, make_asset, today):
        asset = make_asset(condition=Asset.Condition.BEYOND_REPAIR, status=Asset.Status.AVAILABLE)

        run_pass(get_pass(PASS_DISPOSAL_MARKING))

        record = DisposalRecord.objects.get(asset_identifier=asset.asset_id)
        assert record.disposal_value == 0
        assert record.remarks == 'Automated disposal marking: Condition: Beyond Repair'
        asset.refresh_from_db()
        assert asset.condition == Asset.Condition.BEYOND_REPAIR

    def test_auto_approve(self, make_asset):
        make_asset(condition=Asset.Condition.OBSOLETE)
        rules = build_rules(PASS_DISPOSAL_MARKING, {'auto_approve': True})

        run_pass(get_pass(PASS_DISPOSAL_MARKING), rules=rules)

        record = DisposalRecord.objects.get()
        assert record.approved_by == DisposalRecord.SYSTEM_AUTO_APPROVER
        assert record.status == DisposalRecord.Status.COMPLETED
        assert record.approved_at is not None
        assert record.is_auto_approved

    def test_second_run_processes_nothing(self, make_asset):
        make_asset(condition=Asset.Condition.OBSOLETE)

        first = run_pass(get_pass(PASS_DISPOSAL_MARKING))
        second = run_pass(get_pass(PASS_DISPOSAL_MARKING))

        assert first.success == 1
        assert (second.processed, second.success) == (0, 0)
        assert DisposalRecord.objects.count() == 1
        assert AuditLog.objects.count() == 1

    def test_recipients(self, make_asset, staff):
        make_asset(condition=Asset.Condition.OBSOLETE)

        run_pass(get_pass(PASS_DISPOSAL_MARKING))

        assert recipients_of(Notification.NotificationType.DISPOSAL_MARKED) == {'admin', 'stock', 'it'}

    def test_no_recipients_is_not_an_error(self, make_asset):
        make_asset(condition=Asset.Condition.OBSOLETE)

        summary = run_pass(get_pass(PASS_DISPOSAL_MARKING))

        assert summary.success == 1
        assert Notification.objects.count() == 0


class TestFailureIsolation:

    def test_failed_disposal_record_rolls_back_the_asset(self, make_asset, staff):
        asset = make_asset(condition=Asset.Condition.OBSOLETE)

        with mock.patch.object(DisposalRecord.objects, 'create', side_effect=DatabaseError('disk full')):
            summary = run_pass(get_pass(PASS_DISPOSAL_MARKING))

        assert (summary.processed, summary.success, summary.failed) == (1, 0, 1)
        assert summary.errors == [{'asset_id': asset.asset_id, 'error': 'disk full'}]
        asset.refresh_from_db()
        assert asset.status == Asset.Status.ACTIVE
        assert asset.condition == Asset.Condition.OBSOLETE
        assert asset.notes == ''
        assert AuditLog.objects.count() == 0
        assert Notification.objects.count() == 0

    def test_one_failure_does_not_stop_the_batch(self, make_asset, staff):
        first = make_asset(condition=Asset.Condition.OBSOLETE)
        middle = make_asset(condition=Asset.Condition.OBSOLETE)
        last = make_asset(condition=Asset.Condition.OBSOLETE)
        create = DisposalRecord.objects.create

        def fail_for_middle(**kwargs):
            if kwargs['asset_identifier'] == middle.asset_id:
                raise DatabaseError('constraint violated')
            return create(**kwargs)

        with mock.patch.object(DisposalRecord.objects, 'create', side_effect=fail_for_middle):
            summary = run_pass(get_pass(PASS_DISPOSAL_MARKING))

        assert (summary.processed, summary.success, summary.failed) == (3, 2, 1)
        assert [e['asset_id'] for e in summary.errors] == [middle.asset_id]
        statuses = dict(Asset.objects.values_list('asset_id', 'status'))
        assert statuses == {
            first.asset_id: Asset.Status.READY_FOR_SCRAP,
            middle.asset_id: Asset.Status.ACTIVE,
            last.asset_id: Asset.Status.READY_FOR_SCRAP,
        }
        assert not AuditLog.objects.filter(object_id=middle.pk).exists()
        assert not Notification.objects.filter(asset=middle).exists()

    def test_empty_run_touches_nothing(self, make_asset, staff):
        make_asset()

        with mock.patch('apps.lifecycle.runner.execute_transition') as execute:
            summary = run_pass(get_pass(PASS_DISPOSAL_MARKING))

        execute.assert_not_called()
        assert summary.ok is True
        assert summary.processed == 0
        assert summary.message == 'No assets eligible'
        assert Notification.objects.count() == 0

    def test_scan_failure_propagates(self):
        with mock.patch('apps.lifecycle.runner.find_eligible_assets', side_effect=DatabaseError('gone')):
            with pytest.raises(DatabaseError):
                run_pass(get_pass(PASS_DISPOSAL_MARKING))


class TestLifecycleStages:

    def test_dead_stock_stage(self, make_asset, staff, today):
        asset = make_asset(
            purchase_date=today - relativedelta(years=6),
            purchase_cost=Decimal('1500'),
            condition=Asset.Condition.EXCELLENT,
        )

        summary = run_pass(get_pass(PASS_DEAD_STOCK))

        assert summary.success == 1
        asset.refresh_from_db()
        assert asset.status == Asset.Status.READY_FOR_SCRAP
        assert asset.condition == Asset.Condition.POOR
        assert asset.last_audit_date == today
        assert '[AUTO-DEAD-STOCK]' in asset.notes
        assert DisposalRecord.objects.count() == 0
        entry = AuditLog.objects.get()
        assert entry.action == AuditLog.Action.MOVE_TO_DEAD_STOCK
        assert entry.source == 'system-lifecycle'
        assert recipients_of(Notification.NotificationType.DEAD_STOCK) == {'admin', 'stock'}

    def test_dead_stock_condition_stays_in_damage_set(self, make_asset, today):
        asset = make_asset(
            purchase_date=today - relativedelta(years=6),
            purchase_cost=Decimal('1500'),
        )
        rules = build_rules(PASS_DEAD_STOCK, {'damage_conditions': ['damaged']})

        assert run_pass(get_pass(PASS_DEAD_STOCK), rules=rules).success == 1

        asset.refresh_from_db()
        assert asset.condition == Asset.Condition.DAMAGED

    def test_damaged_condition_is_kept(self, make_asset, today):
        asset = make_asset(
            purchase_date=today - relativedelta(years=3),
            condition=Asset.Condition.DAMAGED,
        )

        run_pass(get_pass(PASS_DEAD_STOCK))

        asset.refresh_from_db()
        assert asset.status == Asset.Status.READY_FOR_SCRAP
        assert asset.condition == Asset.Condition.DAMAGED

    def test_disposal_stage(self, make_asset, staff, today):
        asset = make_asset(
            status=Asset.Status.READY_FOR_SCRAP,
            condition=Asset.Condition.DAMAGED,
            last_audit_date=today - relativedelta(days=100),
            purchase_date=today - relativedelta(years=3),
            purchase_cost=Decimal('80000'),
            category='Electronics',
        )

        summary = run_pass(get_pass(PASS_DISPOSAL))

        assert summary.success == 1
        asset.refresh_from_db()
        assert asset.status == Asset.Status.DISPOSED
        assert asset.condition == Asset.Condition.DAMAGED
        record = DisposalRecord.objects.get()
        assert record.disposal_method == DisposalRecord.Method.RECYCLING
        assert record.document_reference.startswith('AUTO-DISP-')
        assert record.approved_by == DisposalRecord.SYSTEM_APPROVER
        assert record.remarks == 'Automated disposal after 100 days in dead stock. Condition: Damaged'
        entry = AuditLog.objects.get()
        assert entry.action == AuditLog.Action.MOVE_TO_DISPOSAL
        assert entry.changes['days_in_dead_stock'] == 100
        assert entry.changes['disposal_record_id'] == record.pk
        assert recipients_of(Notification.NotificationType.DISPOSED) == {'admin', 'stock'}

    def test_disposal_value_uses_condition_multiplier(self, make_asset, today):
        make_asset(
            status=Asset.Status.READY_FOR_SCRAP,
            condition=Asset.Condition.FAIR,
            last_audit_date=today - relativedelta(days=120),
            purchase_cost=Decimal('10000'),
        )

        run_pass(get_pass(PASS_DISPOSAL))

        record = DisposalRecord.objects.get()
        # No purchase date: no depreciation, 10% for fair condition.
        assert record.disposal_value == Decimal('1000')
        assert record.disposal_method == DisposalRecord.Method.DONATION
