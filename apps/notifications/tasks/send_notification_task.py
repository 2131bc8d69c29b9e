"""Celery task to deliver notifications"""
from __future__ import annotations

import logging

from celery import shared_task

from apps.core.celery_tasks import TenantAwareTask
from apps.core.context import organization_context
from apps.notifications.models import Notification
from apps.notifications.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


@shared_task(bind=True, name='notifications.send_notification')
def send_notification_task(self, organization_id: str, notification_id: str):
    organization = TenantAwareTask.get_organization(organization_id)
    with organization_context(organization):
        notification = (
            Notification.objects.select_related('recipient')
            .filter(id=notification_id, organization=organization)
            .first()
        )
        if notification is None:
            logger.warning("Notification %s not found for organization %s", notification_id, organization_id)
            return False
        return NotificationService.deliver(notification)
