import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AutomationSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('pass_name', models.CharField(max_length=30, unique=True, verbose_name='Pass')),
                ('overrides', models.JSONField(blank=True, default=dict, verbose_name='Overrides')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated')),
            ],
            options={
                'verbose_name': 'Automation settings',
                'verbose_name_plural': 'Automation settings',
            },
        ),
        migrations.CreateModel(
            name='AutomationRun',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('job', models.CharField(choices=[('lifecycle', 'Lifecycle automation'), ('disposal_marking', 'Disposal marking'), ('weekly_stats', 'Weekly statistics')], max_length=30, verbose_name='Job')),
                ('stage', models.CharField(blank=True, max_length=30, verbose_name='Stage')),
                ('trigger', models.CharField(choices=[('scheduled', 'Scheduled'), ('manual', 'Manual')], max_length=20, verbose_name='Trigger')),
                ('status', models.CharField(choices=[('running', 'Running'), ('success', 'Success'), ('failed', 'Failed'), ('skipped', 'Skipped')], default='running', max_length=20, verbose_name='Status')),
                ('summary', models.JSONField(blank=True, default=dict, verbose_name='Summary')),
                ('error', models.TextField(blank=True, verbose_name='Error')),
                ('started_at', models.DateTimeField(auto_now_add=True, verbose_name='Started')),
                ('finished_at', models.DateTimeField(blank=True, null=True, verbose_name='Finished')),
                ('triggered_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='automation_runs', to=settings.AUTH_USER_MODEL, verbose_name='Triggered by')),
            ],
            options={
                'verbose_name': 'Automation run',
                'verbose_name_plural': 'Automation runs',
                'ordering': ['-started_at', '-pk'],
                'indexes': [models.Index(fields=['job', '-started_at'], name='automation_run_job_idx')],
                'constraints': [models.UniqueConstraint(condition=models.Q(('status', 'running')), fields=('job',), name='automation_run_single_running_job')],
            },
        ),
    ]
