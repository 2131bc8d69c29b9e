"""Channel routing for notifications"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.core.mail import send_mail

from apps.notifications.models import Notification

logger = logging.getLogger(__name__)

ChannelHandler = Callable[[Notification], None]


def inbox_group(user_id) -> str:
    """Channel-layer group carrying one user's inbox updates."""
    return f"inbox.{user_id}"


class NotificationRouter:
    """
    Deliver a stored notification over its channel.

    Every notification is persisted first, so `in_app` needs no transport.
    Channels without a configured connector fall back to the inbox.
    """

    def __init__(self) -> None:
        self.handlers: Dict[str, ChannelHandler] = {
            'in_app': self._deliver_inbox,
            'email': self._deliver_email,
        }

    def register(self, channel: str, handler: ChannelHandler) -> None:
        self.handlers[channel] = handler

    def dispatch(self, notification: Notification) -> bool:
        notification.delivery_attempts += 1
        notification.save(update_fields=['delivery_attempts'])

        handler = self.handlers.get(notification.channel)
        if handler is None:
            logger.info(
                "No connector for channel %s, notification %s stays in the inbox",
                notification.channel, notification.id,
            )
            handler = self._deliver_inbox
        try:
            handler(notification)
        except Exception as exc:
            logger.warning("Notification %s delivery failed: %s", notification.id, exc)
            notification.mark_failed(str(exc))
            return False

        notification.mark_sent()
        self._publish(notification)
        return True

    def _deliver_inbox(self, notification: Notification) -> None:
        return None

    def _deliver_email(self, notification: Notification) -> None:
        address = getattr(notification.recipient, 'email', '')
        if not address:
            raise ValueError('Recipient has no email address')
        send_mail(
            subject=notification.subject,
            message=notification.body or notification.subject,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[address],
            fail_silently=False,
        )

    def _publish(self, notification: Notification) -> None:
        layer = get_channel_layer()
        if layer is None:
            return
        async_to_sync(layer.group_send)(
            inbox_group(notification.recipient_id),
            {'type': 'inbox.notification', 'payload': self.payload(notification)},
        )

    @staticmethod
    def payload(notification: Notification) -> Dict[str, Any]:
        return {
            'id': str(notification.id),
            'subject': notification.subject,
            'status': notification.status,
            'priority': notification.priority,
            'event': notification.metadata.get('event'),
            'entity_type': notification.entity_type,
            'entity_id': notification.entity_id or None,
            'sent_at': notification.sent_at.isoformat() if notification.sent_at else None,
        }
