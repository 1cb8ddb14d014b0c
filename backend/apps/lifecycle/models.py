from django.conf import settings
from django.db import models
from django.db.models import Q


class AutomationRun(models.Model):
    """One invocation of an automation job, scheduled or manual."""

    class Job(models.TextChoices):
        LIFECYCLE = 'lifecycle', 'Lifecycle automation'
        DISPOSAL_MARKING = 'disposal_marking', 'Disposal marking'
        WEEKLY_STATS = 'weekly_stats', 'Weekly statistics'

    class Trigger(models.TextChoices):
        SCHEDULED = 'scheduled', 'Scheduled'
        MANUAL = 'manual', 'Manual'

    class Status(models.TextChoices):
        RUNNING = 'running', 'Running'
        SUCCESS = 'success', 'Success'
        FAILED = 'failed', 'Failed'
        SKIPPED = 'skipped', 'Skipped'

    job = models.CharField('Job', max_length=30, choices=Job.choices)
    stage = models.CharField('Stage', max_length=30, blank=True)
    trigger = models.CharField('Trigger', max_length=20, choices=Trigger.choices)
    triggered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='automation_runs',
        verbose_name='Triggered by',
    )
    status = models.CharField(
        'Status', max_length=20, choices=Status.choices, default=Status.RUNNING,
    )
    summary = models.JSONField('Summary', default=dict, blank=True)
    error = models.TextField('Error', blank=True)
    started_at = models.DateTimeField('Started', auto_now_add=True)
    finished_at = models.DateTimeField('Finished', null=True, blank=True)

    class Meta:
        verbose_name = 'Automation run'
        verbose_name_plural = 'Automation runs'
        ordering = ['-started_at', '-pk']
        constraints = [
            # Run lock: at most one running invocation per job.
            models.UniqueConstraint(
                fields=['job'],
                condition=Q(status='running'),
                name='automation_run_single_running_job',
            ),
        ]
        indexes = [
            models.Index(fields=['job', '-started_at'], name='automation_run_job_idx'),
        ]

    def __str__(self):
        return f'{self.get_job_display()} #{self.pk} ({self.status})'

    @property
    def duration(self):
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()


class AutomationSettings(models.Model):
    """Stored rule overrides for one automation pass."""
    pass_name = models.CharField('Pass', max_length=30, unique=True)
    overrides = models.JSONField('Overrides', default=dict, blank=True)
    updated_at = models.DateTimeField('Updated', auto_now=True)

    class Meta:
        verbose_name = 'Automation settings'
        verbose_name_plural = 'Automation settings'

    def __str__(self):
        return self.pass_name
