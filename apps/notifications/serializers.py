"""Notification Serializers"""

from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = [
            'id', 'recipient', 'channel', 'subject', 'body',
            'status', 'priority', 'metadata', 'sent_at', 'read_at',
            'delivery_attempts', 'entity_type', 'entity_id', 'created_at',
        ]
        read_only_fields = fields
