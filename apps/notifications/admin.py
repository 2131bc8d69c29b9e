from django.contrib import admin

from apps.core.admin_mixins import OrganizationAwareAdminMixin
from .models import Notification


@admin.register(Notification)
class NotificationAdmin(OrganizationAwareAdminMixin, admin.ModelAdmin):
    list_display = ['subject', 'recipient', 'entity_type', 'entity_id', 'channel', 'status', 'created_at']
    list_filter = ['status', 'channel', 'entity_type']
    search_fields = ['recipient__email', 'subject', 'entity_id']
    raw_id_fields = ['recipient']
    readonly_fields = ['metadata', 'delivery_attempts', 'sent_at', 'read_at']
    date_hierarchy = 'created_at'
