"""Notification orchestration services"""
from __future__ import annotations

import logging
from typing import Any, Dict

from django.utils import timezone

from apps.notifications.models import Notification
from .notification_router import NotificationRouter

logger = logging.getLogger(__name__)


class NotificationService:
    """Create inbox records and hand them to the router."""

    router = NotificationRouter()

    @classmethod
    def notify(
        cls,
        *,
        user,
        subject: str,
        body: str = '',
        organization_id: str | None = None,
        channel: str = 'in_app',
        entity_type: str | None = None,
        entity_id=None,
        priority: str = 'normal',
        metadata: Dict[str, Any] | None = None,
        send_async: bool = True,
    ) -> Notification | None:
        """
        Store a notification for `user` and deliver it.

        Returns None when the recipient is missing, inactive or has no
        tenant to file the notification under.
        """
        if user is None or not getattr(user, 'is_active', False):
            return None
        organization_id = organization_id or getattr(user, 'organization_id', None)
        if not organization_id:
            logger.info("Skipping notification for user %s without organization", user.pk)
            return None

        notification = Notification.objects.create(
            organization_id=organization_id,
            recipient=user,
            channel=channel,
            subject=subject[:255],
            body=body,
            priority=priority,
            metadata=metadata or {},
            entity_type=entity_type or '',
            entity_id=str(entity_id) if entity_id else '',
        )
        if send_async:
            from apps.notifications.tasks import send_notification_task

            send_notification_task.delay(
                organization_id=str(notification.organization_id),
                notification_id=str(notification.id),
            )
        else:
            cls.deliver(notification)
        return notification

    @classmethod
    def deliver(cls, notification: Notification) -> bool:
        return cls.router.dispatch(notification)

    @staticmethod
    def inbox(user):
        """The caller's notifications inside their own organization."""
        if not user or not user.is_authenticated:
            return Notification.objects.none()
        return Notification.objects.filter(organization_id=user.organization_id, recipient=user)

    @classmethod
    def mark_as_read(cls, notification_id, user) -> bool:
        notification = cls.inbox(user).filter(id=notification_id).first()
        if notification is None:
            return False
        notification.mark_read()
        return True

    @classmethod
    def mark_all_as_read(cls, user) -> int:
        return cls.inbox(user).exclude(status='read').update(status='read', read_at=timezone.now())

    @classmethod
    def unread_count(cls, user) -> int:
        return cls.inbox(user).exclude(status='read').count()
