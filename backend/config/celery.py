"""Celery application for scheduled asset automation."""
import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('asset_lifecycle')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
