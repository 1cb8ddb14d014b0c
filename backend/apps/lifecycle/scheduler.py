"""
Automation jobs and their run log.

Jobs are started by Celery beat (``run_scheduled``) or from the API
(``trigger_now``). Both go through the same per-job run lock, and every
invocation leaves exactly one ``AutomationRun`` row.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.assets.models import Asset, Notification
from apps.assets.notifications import notify

from .config import (
    PASS_DEAD_STOCK, PASS_DISPOSAL, PASS_DISPOSAL_MARKING, load_rules, rules_to_dict,
)
from .exceptions import JobAlreadyRunning, UnknownJob
from .models import AutomationRun
from .passes import get_pass
from .runner import run_pass
from .scanner import find_eligible_assets

logger = logging.getLogger(__name__)

User = get_user_model()

JOB_LIFECYCLE = AutomationRun.Job.LIFECYCLE.value
JOB_DISPOSAL_MARKING = AutomationRun.Job.DISPOSAL_MARKING.value
JOB_WEEKLY_STATS = AutomationRun.Job.WEEKLY_STATS.value

# Passes run by each job, in order.
JOB_STAGES = {
    JOB_LIFECYCLE: (PASS_DEAD_STOCK, PASS_DISPOSAL),
    JOB_DISPOSAL_MARKING: (PASS_DISPOSAL_MARKING,),
}

TASK_JOBS = {
    'apps.lifecycle.tasks.run_lifecycle_automation': JOB_LIFECYCLE,
    'apps.lifecycle.tasks.run_disposal_automation': JOB_DISPOSAL_MARKING,
    'apps.lifecycle.tasks.snapshot_automation_stats': JOB_WEEKLY_STATS,
}

DEFAULT_LOCK_TIMEOUT = 6 * 60 * 60


# ---------------------------------------------------------------------------
# Run lock
# ---------------------------------------------------------------------------

def release_stale_runs(job):
    """Fail 'running' rows older than AUTOMATION_RUN_LOCK_TIMEOUT."""
    timeout = getattr(settings, 'AUTOMATION_RUN_LOCK_TIMEOUT', DEFAULT_LOCK_TIMEOUT)
    now = timezone.now()
    released = AutomationRun.objects.filter(
        job=job,
        status=AutomationRun.Status.RUNNING,
        started_at__lt=now - timedelta(seconds=timeout),
    ).update(
        status=AutomationRun.Status.FAILED,
        finished_at=now,
        error='Run lock expired',
    )
    if released:
        logger.warning('Released %d stale run lock(s) for %s', released, job)
    return released


def acquire_run_lock(job, trigger, user=None, stage=''):
    """
    Insert the 'running' row for a job.

    When another invocation holds the lock a 'skipped' row is recorded and
    JobAlreadyRunning is raised.
    """
    release_stale_runs(job)
    try:
        with transaction.atomic():
            return AutomationRun.objects.create(
                job=job, stage=stage or '', trigger=trigger, triggered_by=user,
            )
    except IntegrityError:
        holder = AutomationRun.objects.filter(job=job, status=AutomationRun.Status.RUNNING).first()
        AutomationRun.objects.create(
            job=job,
            stage=stage or '',
            trigger=trigger,
            triggered_by=user,
            status=AutomationRun.Status.SKIPPED,
            error=f'Job already running (run #{holder.pk if holder else "?"})',
            finished_at=timezone.now(),
        )
        logger.warning('%s run skipped: job already running', job)
        raise JobAlreadyRunning(job, holder) from None


def finish_run(run, status, summary=None, error=''):
    run.status = status
    run.summary = summary or {}
    run.error = error
    run.finished_at = timezone.now()
    run.save(update_fields=['status', 'summary', 'error', 'finished_at'])
    return run


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------

def stages_for(job, stage=None):
    if job not in JOB_STAGES:
        raise UnknownJob(f'Unknown automation job "{job}"')
    stages = JOB_STAGES[job]
    if stage:
        if stage not in stages:
            raise UnknownJob(f'Job "{job}" has no stage "{stage}"')
        return (stage,)
    return stages


def run_job(job, stage=None, completed=None):
    """
    Run the passes of a job and return its summary.

    Summaries of finished stages are also collected into ``completed`` so a
    caller can record them when a later stage fails.
    """
    if job == JOB_WEEKLY_STATS:
        return snapshot_stats()

    summaries = completed if completed is not None else {}
    for name in stages_for(job, stage):
        summaries[name] = run_pass(get_pass(name)).as_dict()

    if len(summaries) == 1:
        result = next(iter(summaries.values()))
    else:
        result = {
            'ok': all(s['ok'] for s in summaries.values()),
            'processed': sum(s['processed'] for s in summaries.values()),
            'success': sum(s['success'] for s in summaries.values()),
            'failed': sum(s['failed'] for s in summaries.values()),
            'duration': round(sum(s['duration'] for s in summaries.values()), 3),
            'stages': summaries,
        }
    result['timestamp'] = timezone.now().isoformat()

    if result['success']:
        notify_run_summary(job, result)
    return result


def notify_run_summary(job, result):
    """One notification per admin after a run that changed something."""
    admins = list(User.objects.filter(role='admin', is_active=True).order_by('pk'))
    if not admins:
        return 0
    label = AutomationRun.Job(job).label
    message = (
        f'{label} processed {result["processed"]} assets: '
        f'{result["success"]} succeeded, {result["failed"]} failed.'
    )
    return notify(
        admins,
        Notification.NotificationType.AUTOMATION_SUMMARY,
        f'{label} completed',
        message,
        priority=Notification.Priority.LOW,
        action_url='/automation',
        data={
            'job': job,
            'processed': result['processed'],
            'success': result['success'],
            'failed': result['failed'],
        },
    )


def _execute(job, trigger, user=None, stage=None):
    if job != JOB_WEEKLY_STATS:
        stages_for(job, stage)
    run = acquire_run_lock(job, trigger, user=user, stage=stage)
    logger.info('Starting %s run #%s (%s)', job, run.pk, trigger)
    completed = {}
    try:
        result = run_job(job, stage, completed=completed)
    except Exception as exc:
        summary = {'stages': completed} if completed else None
        finish_run(run, AutomationRun.Status.FAILED, summary=summary, error=str(exc))
        raise
    finish_run(run, AutomationRun.Status.SUCCESS, summary=result)
    logger.info('Finished %s run #%s', job, run.pk)
    return result


def trigger_now(job, user=None, stage=None):
    """Run a job synchronously on request; errors reach the caller."""
    return _execute(job, AutomationRun.Trigger.MANUAL, user=user, stage=stage)


def run_scheduled(job):
    """Entry point for Celery beat. Never raises."""
    try:
        return _execute(job, AutomationRun.Trigger.SCHEDULED)
    except JobAlreadyRunning:
        return None
    except Exception:
        logger.exception('Scheduled %s run failed', job)
        return None


# ---------------------------------------------------------------------------
# Statistics and status
# ---------------------------------------------------------------------------

def get_stats(job):
    """Counts for a job's dashboard. Scans only; nothing is written."""
    today = timezone.localdate()

    if job == JOB_DISPOSAL_MARKING:
        rules = load_rules(PASS_DISPOSAL_MARKING)
        eligible = find_eligible_assets(get_pass(PASS_DISPOSAL_MARKING), rules, today)
        return {
            'total_assets': Asset.objects.exclude(status=Asset.Status.DISPOSED).count(),
            'eligible_for_disposal': len(eligible),
            'already_marked': Asset.objects.filter(status=Asset.Status.READY_FOR_SCRAP).count(),
            'rules': rules_to_dict(rules),
        }

    if job == JOB_LIFECYCLE:
        dead_stock_rules = load_rules(PASS_DEAD_STOCK)
        disposal_rules = load_rules(PASS_DISPOSAL)
        return {
            'total_assets': Asset.objects.count(),
            'current_state': {
                'active': Asset.objects.filter(status__in=get_pass(PASS_DEAD_STOCK).source_statuses).count(),
                'dead_stock': Asset.objects.filter(status=Asset.Status.READY_FOR_SCRAP).count(),
                'disposed': Asset.objects.filter(status=Asset.Status.DISPOSED).count(),
            },
            'eligible': {
                'for_dead_stock': len(find_eligible_assets(get_pass(PASS_DEAD_STOCK), dead_stock_rules, today)),
                'for_disposal': len(find_eligible_assets(get_pass(PASS_DISPOSAL), disposal_rules, today)),
            },
            'configuration': {
                PASS_DEAD_STOCK: rules_to_dict(dead_stock_rules),
                PASS_DISPOSAL: rules_to_dict(disposal_rules),
            },
        }

    raise UnknownJob(f'No statistics for job "{job}"')


def snapshot_stats():
    stats = {
        JOB_LIFECYCLE: get_stats(JOB_LIFECYCLE),
        JOB_DISPOSAL_MARKING: get_stats(JOB_DISPOSAL_MARKING),
        'timestamp': timezone.now().isoformat(),
    }
    logger.info('Weekly automation statistics: %s', stats)
    return stats


def _run_info(run):
    if run is None:
        return None
    return {
        'id': run.pk,
        'status': run.status,
        'trigger': run.trigger,
        'started_at': run.started_at.isoformat(),
        'finished_at': run.finished_at.isoformat() if run.finished_at else None,
    }


def get_status():
    """Beat entries for the automation jobs with their running and last runs."""
    schedule = getattr(settings, 'CELERY_BEAT_SCHEDULE', {})
    jobs = []
    for entry_name, entry in schedule.items():
        job = TASK_JOBS.get(entry['task'])
        if job is None:
            continue
        running = AutomationRun.objects.filter(job=job, status=AutomationRun.Status.RUNNING).first()
        last = (
            AutomationRun.objects
            .filter(job=job)
            .exclude(status=AutomationRun.Status.RUNNING)
            .first()
        )
        jobs.append({
            'name': entry_name,
            'job': job,
            'task': entry['task'],
            'schedule': str(entry['schedule']),
            'running': running is not None,
            'current_run': _run_info(running),
            'last_run': _run_info(last),
        })
    return {
        'timezone': settings.TIME_ZONE,
        'jobs': jobs,
        'running': [job['job'] for job in jobs if job['running']],
    }
