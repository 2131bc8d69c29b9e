"""Approvals app filters."""
import django_filters

from .definitions import ENTITY_TYPE_CHOICES, PRIORITY_CHOICES
from .models import ApprovalRequest, ApprovalWorkflow


class ApprovalWorkflowFilter(django_filters.FilterSet):
    name = django_filters.CharFilter(lookup_expr='icontains')
    company = django_filters.UUIDFilter()
    entity_type = django_filters.ChoiceFilter(choices=ENTITY_TYPE_CHOICES)
    entity_sub_type = django_filters.CharFilter()
    priority = django_filters.ChoiceFilter(choices=PRIORITY_CHOICES)
    is_active = django_filters.BooleanFilter()

    class Meta:
        model = ApprovalWorkflow
        fields = ['company', 'entity_type', 'entity_sub_type', 'priority', 'is_active']


class ApprovalRequestFilter(django_filters.FilterSet):
    company = django_filters.UUIDFilter()
    workflow = django_filters.UUIDFilter()
    entity_type = django_filters.ChoiceFilter(choices=ENTITY_TYPE_CHOICES)
    entity_id = django_filters.CharFilter()
    status = django_filters.ChoiceFilter(choices=ApprovalRequest.STATUS_CHOICES)
    requested_by = django_filters.UUIDFilter()
    requested_after = django_filters.DateTimeFilter(field_name='requested_at', lookup_expr='gte')
    requested_before = django_filters.DateTimeFilter(field_name='requested_at', lookup_expr='lte')

    class Meta:
        model = ApprovalRequest
        fields = ['company', 'workflow', 'entity_type', 'entity_id', 'status', 'requested_by']
