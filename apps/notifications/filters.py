"""Notifications app filters."""
import django_filters

from .models import PRIORITY_CHOICES, STATUS_CHOICES, Notification


class NotificationFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=STATUS_CHOICES)
    priority = django_filters.ChoiceFilter(choices=PRIORITY_CHOICES)
    event = django_filters.CharFilter(field_name='metadata__event')
    unread = django_filters.BooleanFilter(method='filter_unread')
    created_after = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='gte')

    class Meta:
        model = Notification
        fields = ['status', 'priority', 'channel', 'entity_type', 'entity_id']

    def filter_unread(self, queryset, name, value):
        if value is None:
            return queryset
        return queryset.exclude(status='read') if value else queryset.filter(status='read')
