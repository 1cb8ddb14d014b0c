from django.contrib import admin
from .models import AutomationRun, AutomationSettings


@admin.register(AutomationRun)
class AutomationRunAdmin(admin.ModelAdmin):
    list_display = ['job', 'stage', 'trigger', 'status', 'triggered_by', 'started_at', 'finished_at']
    list_filter = ['job', 'status', 'trigger']
    readonly_fields = [
        'job', 'stage', 'trigger', 'triggered_by', 'summary',
        'error', 'started_at', 'finished_at',
    ]


@admin.register(AutomationSettings)
class AutomationSettingsAdmin(admin.ModelAdmin):
    list_display = ['pass_name', 'updated_at']
