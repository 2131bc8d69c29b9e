"""Notification Models"""
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone
from apps.core.models import OrganizationEntity


CHANNEL_CHOICES = [
    ('in_app', 'In App'), ('email', 'Email'), ('sms', 'SMS'),
    ('slack', 'Slack'), ('teams', 'Teams'),
]
STATUS_CHOICES = [
    ('pending', 'Pending'), ('sent', 'Sent'), ('read', 'Read'), ('failed', 'Failed'),
]
PRIORITY_CHOICES = [
    ('low', 'Low'), ('normal', 'Normal'), ('high', 'High'), ('critical', 'Critical'),
]


class Notification(OrganizationEntity):
    """Notification record"""
    recipient = models.ForeignKey('authentication.User', on_delete=models.CASCADE, related_name='notifications')

    channel = models.CharField(max_length=20, choices=CHANNEL_CHOICES, default='in_app')

    subject = models.CharField(max_length=255)
    body = models.TextField(blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='normal')
    metadata = models.JSONField(default=dict, blank=True)
    delivery_attempts = models.PositiveSmallIntegerField(default=0)

    sent_at = models.DateTimeField(null=True, blank=True)
    read_at = models.DateTimeField(null=True, blank=True)

    # Reference to entity
    entity_type = models.CharField(max_length=50, blank=True)
    entity_id = models.CharField(max_length=64, blank=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['organization', 'recipient', 'status'], name='notif_org_rcpt_status_idx'),
        ]

    def __str__(self):
        return f"{self.recipient_id} - {self.subject[:50]}"

    def clean(self):
        super().clean()
        if self.recipient_id and self.organization_id and self.recipient.organization_id != self.organization_id:
            raise ValidationError({'recipient': 'Recipient must belong to the same organization.'})

    def save(self, *args, **kwargs):
        if self.recipient_id and not self.organization_id:
            self.organization_id = self.recipient.organization_id
        if not kwargs.get('update_fields'):
            self.full_clean()
        return super().save(*args, **kwargs)

    def mark_sent(self):
        self.status = 'sent'
        self.sent_at = timezone.now()
        self.save(update_fields=['status', 'sent_at'])

    def mark_failed(self, reason: str = ''):
        self.status = 'failed'
        self.metadata = {**self.metadata, 'error': reason}
        self.save(update_fields=['status', 'metadata'])

    def mark_read(self):
        self.status = 'read'
        self.read_at = timezone.now()
        self.save(update_fields=['status', 'read_at'])
