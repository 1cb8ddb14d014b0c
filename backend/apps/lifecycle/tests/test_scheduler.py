from datetime import timedelta
from unittest import mock

import pytest
from dateutil.relativedelta import relativedelta
from django.utils import timezone

from apps.assets.models import Asset, Notification
from apps.lifecycle import runner, scheduler, tasks
from apps.lifecycle.exceptions import JobAlreadyRunning, UnknownJob
from apps.lifecycle.models import AutomationRun

pytestmark = pytest.mark.django_db


class TestRunLog:

    def test_manual_run_is_recorded(self, make_asset, admin_user):
        make_asset(condition=Asset.Condition.OBSOLETE)

        result = scheduler.trigger_now(scheduler.JOB_DISPOSAL_MARKING, user=admin_user)

        assert result['success'] == 1
        run = AutomationRun.objects.get()
        assert run.status == AutomationRun.Status.SUCCESS
        assert run.trigger == AutomationRun.Trigger.MANUAL
        assert run.triggered_by == admin_user
        assert run.summary['processed'] == 1
        assert run.finished_at is not None

    def test_locked_job_is_skipped(self, admin_user):
        holder = AutomationRun.objects.create(
            job=scheduler.JOB_LIFECYCLE, trigger=AutomationRun.Trigger.SCHEDULED,
        )

        with pytest.raises(JobAlreadyRunning) as exc_info:
            scheduler.trigger_now(scheduler.JOB_LIFECYCLE, user=admin_user)

        assert exc_info.value.run == holder
        skipped = AutomationRun.objects.get(status=AutomationRun.Status.SKIPPED)
        assert skipped.job == scheduler.JOB_LIFECYCLE
        assert f'run #{holder.pk}' in skipped.error
        holder.refresh_from_db()
        assert holder.status == AutomationRun.Status.RUNNING

    def test_lock_is_per_job(self, make_asset):
        AutomationRun.objects.create(
            job=scheduler.JOB_LIFECYCLE, trigger=AutomationRun.Trigger.SCHEDULED,
        )

        scheduler.trigger_now(scheduler.JOB_DISPOSAL_MARKING)

        assert AutomationRun.objects.filter(
            job=scheduler.JOB_DISPOSAL_MARKING, status=AutomationRun.Status.SUCCESS,
        ).exists()

    def test_stale_lock_is_released(self, settings):
        settings.AUTOMATION_RUN_LOCK_TIMEOUT = 60
        stale = AutomationRun.objects.create(
            job=scheduler.JOB_LIFECYCLE, trigger=AutomationRun.Trigger.SCHEDULED,
        )
        AutomationRun.objects.filter(pk=stale.pk).update(
            started_at=timezone.now() - timedelta(minutes=5),
        )

        scheduler.trigger_now(scheduler.JOB_LIFECYCLE)

        stale.refresh_from_db()
        assert stale.status == AutomationRun.Status.FAILED
        assert stale.error == 'Run lock expired'
        assert AutomationRun.objects.filter(status=AutomationRun.Status.SUCCESS).count() == 1

    def test_scheduled_failure_is_logged_not_raised(self):
        with mock.patch('apps.lifecycle.scheduler.run_pass', side_effect=RuntimeError('scan failed')):
            result = scheduler.run_scheduled(scheduler.JOB_DISPOSAL_MARKING)

        assert result is None
        run = AutomationRun.objects.get()
        assert run.status == AutomationRun.Status.FAILED
        assert run.trigger == AutomationRun.Trigger.SCHEDULED
        assert run.error == 'scan failed'

    def test_manual_failure_is_raised(self):
        with mock.patch('apps.lifecycle.scheduler.run_pass', side_effect=RuntimeError('scan failed')):
            with pytest.raises(RuntimeError):
                scheduler.trigger_now(scheduler.JOB_DISPOSAL_MARKING)

        assert AutomationRun.objects.get().status == AutomationRun.Status.FAILED

    def test_scheduled_skip_returns_none(self):
        AutomationRun.objects.create(
            job=scheduler.JOB_DISPOSAL_MARKING, trigger=AutomationRun.Trigger.MANUAL,
        )

        assert scheduler.run_scheduled(scheduler.JOB_DISPOSAL_MARKING) is None
        assert AutomationRun.objects.filter(status=AutomationRun.Status.SKIPPED).count() == 1

    def test_unknown_job(self):
        with pytest.raises(UnknownJob):
            scheduler.trigger_now('inventory')
        with pytest.raises(UnknownJob):
            scheduler.trigger_now(scheduler.JOB_LIFECYCLE, stage='disposal_marking')
        assert not AutomationRun.objects.exists()


class TestLifecycleJob:

    def test_both_stages_run_in_order(self, make_asset, today):
        old = make_asset(purchase_date=today - relativedelta(years=6), purchase_cost='1500.00')
        waiting = make_asset(
            status=Asset.Status.READY_FOR_SCRAP,
            last_audit_date=today - relativedelta(days=95),
        )

        result = scheduler.trigger_now(scheduler.JOB_LIFECYCLE)

        assert set(result['stages']) == {'dead_stock', 'disposal'}
        assert result['success'] == 2
        old.refresh_from_db()
        waiting.refresh_from_db()
        # Moved to dead stock today, so not yet old enough for disposal.
        assert old.status == Asset.Status.READY_FOR_SCRAP
        assert waiting.status == Asset.Status.DISPOSED

    def test_single_stage(self, make_asset, today):
        old = make_asset(purchase_date=today - relativedelta(years=6), purchase_cost='1500.00')
        waiting = make_asset(
            status=Asset.Status.READY_FOR_SCRAP,
            last_audit_date=today - relativedelta(days=95),
        )

        result = scheduler.trigger_now(scheduler.JOB_LIFECYCLE, stage='disposal')

        assert result['pass_name'] == 'disposal'
        old.refresh_from_db()
        waiting.refresh_from_db()
        assert old.status == Asset.Status.ACTIVE
        assert waiting.status == Asset.Status.DISPOSED
        assert AutomationRun.objects.get().stage == 'disposal'

    def test_failed_stage_keeps_completed_summaries(self, make_asset, today):
        old = make_asset(purchase_date=today - relativedelta(years=6), purchase_cost='1500.00')

        def fail_disposal(automation_pass):
            if automation_pass.name == 'disposal':
                raise RuntimeError('disposal scan failed')
            return runner.run_pass(automation_pass)

        with mock.patch('apps.lifecycle.scheduler.run_pass', side_effect=fail_disposal):
            with pytest.raises(RuntimeError):
                scheduler.trigger_now(scheduler.JOB_LIFECYCLE)

        run = AutomationRun.objects.get()
        assert run.status == AutomationRun.Status.FAILED
        assert run.error == 'disposal scan failed'
        assert list(run.summary['stages']) == ['dead_stock']
        assert run.summary['stages']['dead_stock']['success'] == 1
        old.refresh_from_db()
        assert old.status == Asset.Status.READY_FOR_SCRAP

    def test_admins_get_one_summary(self, make_asset, staff):
        make_asset(condition=Asset.Condition.OBSOLETE)
        make_asset(condition=Asset.Condition.BEYOND_REPAIR)

        scheduler.trigger_now(scheduler.JOB_DISPOSAL_MARKING)

        summaries = Notification.objects.filter(
            notification_type=Notification.NotificationType.AUTOMATION_SUMMARY,
        )
        assert [n.recipient for n in summaries] == [staff['admin']]
        assert summaries[0].data['success'] == 2

    def test_no_summary_without_changes(self, staff):
        scheduler.trigger_now(scheduler.JOB_DISPOSAL_MARKING)

        assert Notification.objects.count() == 0


class TestStats:

    def test_disposal_marking_stats(self, make_asset):
        make_asset(condition=Asset.Condition.OBSOLETE)
        make_asset()
        make_asset(status=Asset.Status.READY_FOR_SCRAP)
        make_asset(status=Asset.Status.DISPOSED)

        stats = scheduler.get_stats(scheduler.JOB_DISPOSAL_MARKING)

        assert stats['total_assets'] == 3
        assert stats['eligible_for_disposal'] == 1
        assert stats['already_marked'] == 1
        assert stats['rules']['max_age_years'] == 7

    def test_lifecycle_stats(self, make_asset, today):
        make_asset(purchase_date=today - relativedelta(years=6), purchase_cost='1500.00')
        make_asset(status=Asset.Status.READY_FOR_SCRAP, last_audit_date=today - relativedelta(days=91))
        make_asset(status=Asset.Status.DISPOSED)

        stats = scheduler.get_stats(scheduler.JOB_LIFECYCLE)

        assert stats['total_assets'] == 3
        assert stats['current_state'] == {'active': 1, 'dead_stock': 1, 'disposed': 1}
        assert stats['eligible'] == {'for_dead_stock': 1, 'for_disposal': 1}
        assert stats['configuration']['disposal']['days_in_dead_stock'] == 90

    def test_weekly_snapshot_task(self):
        result = tasks.snapshot_automation_stats()

        assert set(result) >= {'lifecycle', 'disposal_marking', 'timestamp'}
        run = AutomationRun.objects.get()
        assert run.job == scheduler.JOB_WEEKLY_STATS
        assert run.status == AutomationRun.Status.SUCCESS


def test_status_lists_beat_entries():
    AutomationRun.objects.create(
        job=scheduler.JOB_DISPOSAL_MARKING, trigger=AutomationRun.Trigger.MANUAL,
    )

    status = scheduler.get_status()

    jobs = {job['job']: job for job in status['jobs']}
    assert set(jobs) == {'lifecycle', 'disposal_marking', 'weekly_stats'}
    assert jobs['disposal_marking']['running'] is True
    assert jobs['lifecycle']['last_run'] is None
    assert status['running'] == ['disposal_marking']


def test_tasks_run_scheduled_jobs(make_asset):
    make_asset(condition=Asset.Condition.OBSOLETE)

    result = tasks.run_disposal_automation()

    assert result['success'] == 1
    assert AutomationRun.objects.get().trigger == AutomationRun.Trigger.SCHEDULED
