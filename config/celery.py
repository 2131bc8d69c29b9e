"""Celery application bootstrap for the LedgerFlow platform."""

import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

app = Celery('ledgerflow')
app.config_from_object('django.conf:settings', namespace='CELERY')
# Task modules live in per-app `tasks` packages
app.autodiscover_tasks(['apps.notifications', 'apps.approvals'])
