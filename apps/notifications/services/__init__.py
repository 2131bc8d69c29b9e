"""Notification service layer"""
from .notification_router import NotificationRouter
from .notification_service import NotificationService

__all__ = [
    'NotificationRouter',
    'NotificationService',
]
