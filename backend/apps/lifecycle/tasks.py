"""
Celery tasks for the asset automation.

Tasks:
1. run_lifecycle_automation   - dead stock, then disposal (daily 01:00)
2. run_disposal_automation    - disposal marking (daily 02:00)
3. snapshot_automation_stats  - weekly statistics (Monday 03:00)

Schedules live in settings.CELERY_BEAT_SCHEDULE.
"""
from celery import shared_task
from celery.utils.log import get_task_logger

from . import scheduler

logger = get_task_logger(__name__)


@shared_task
def run_lifecycle_automation():
    """
    Daily lifecycle job.

    Returns:
        dict with the combined stage summaries, or None when the run was
        skipped or failed (see AutomationRun for details).
    """
    logger.info('Lifecycle automation triggered by scheduler')
    return scheduler.run_scheduled(scheduler.JOB_LIFECYCLE)


@shared_task
def run_disposal_automation():
    """Daily disposal marking job."""
    logger.info('Disposal automation triggered by scheduler')
    return scheduler.run_scheduled(scheduler.JOB_DISPOSAL_MARKING)


@shared_task
def snapshot_automation_stats():
    return scheduler.run_scheduled(scheduler.JOB_WEEKLY_STATS)
