"""
Approval Serializers
"""

from rest_framework import serializers
from drf_spectacular.utils import extend_schema_field
from drf_spectacular.types import OpenApiTypes

from apps.authentication.serializers import UserSummarySerializer
from apps.core.models import Company
from apps.core.tenant_guards import resolve_request_organization
from .definitions import ENTITY_TYPE_CHOICES
from .models import ApprovalAssignee, ApprovalAudit, ApprovalRequest, ApprovalWorkflow
from .services import ACTIONS


class TenantCompanyField(serializers.PrimaryKeyRelatedField):
    """Company choices limited to the caller's organization."""

    def get_queryset(self):
        request = self.context.get('request')
        organization = resolve_request_organization(request) if request else None
        if organization is None:
            return Company.objects.none()
        return Company.objects.filter(organization=organization, is_active=True)


class ApprovalWorkflowSerializer(serializers.ModelSerializer):
    company = TenantCompanyField()
    steps = serializers.JSONField()
    conditions = serializers.JSONField(required=False)
    escalation_rules = serializers.JSONField(required=False)
    request_count = serializers.SerializerMethodField()

    class Meta:
        model = ApprovalWorkflow
        fields = [
            'id', 'company', 'name', 'description', 'entity_type', 'entity_sub_type',
            'steps', 'conditions', 'escalation_rules', 'auto_approval', 'priority',
            'is_active', 'request_count', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'request_count', 'created_at', 'updated_at']

    @extend_schema_field(OpenApiTypes.INT)
    def get_request_count(self, obj):
        return obj.requests.count()

    def validate(self, attrs):
        if self.instance is not None and 'company' in attrs and attrs['company'].pk != self.instance.company_id:
            raise serializers.ValidationError({'company': 'A workflow cannot move to another company.'})
        return attrs

    def to_config(self):
        """Validated data as a workflow configuration for the engine."""
        config = dict(self.validated_data)
        config.pop('company', None)
        return config


class ApprovalAssigneeSerializer(serializers.ModelSerializer):
    user_details = UserSummarySerializer(source='user', read_only=True)
    escalated_to_details = UserSummarySerializer(source='escalated_to', read_only=True)

    class Meta:
        model = ApprovalAssignee
        fields = [
            'id', 'user', 'user_details', 'step_id', 'step_name', 'step_order',
            'status', 'assigned_at', 'completed_at', 'comments',
            'escalated_to', 'escalated_to_details', 'escalation_reason', 'escalated_from',
        ]
        read_only_fields = fields


class ApprovalRequestListSerializer(serializers.ModelSerializer):
    workflow_name = serializers.ReadOnlyField(source='workflow.name')
    requested_by_details = UserSummarySerializer(source='requested_by', read_only=True)

    class Meta:
        model = ApprovalRequest
        fields = [
            'id', 'company', 'workflow', 'workflow_name', 'entity_type', 'entity_id', 'entity_sub_type',
            'status', 'current_step', 'total_steps', 'completed_steps',
            'requested_by', 'requested_by_details', 'requested_at', 'approved_at', 'rejected_at',
        ]
        read_only_fields = fields


class ApprovalRequestSerializer(ApprovalRequestListSerializer):
    """Request view including the assignees of every step"""
    assignees = ApprovalAssigneeSerializer(many=True, read_only=True)
    current_step_name = serializers.SerializerMethodField()

    class Meta(ApprovalRequestListSerializer.Meta):
        fields = ApprovalRequestListSerializer.Meta.fields + [
            'current_step_name', 'comments', 'metadata', 'assignees', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    @extend_schema_field(OpenApiTypes.STR)
    def get_current_step_name(self, obj):
        step = obj.current_step_definition
        return step.name if step else None


class ApprovalRequestCreateSerializer(serializers.Serializer):
    company = TenantCompanyField()
    entity_type = serializers.ChoiceField(choices=ENTITY_TYPE_CHOICES)
    entity_id = serializers.CharField(max_length=64)
    entity_sub_type = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    metadata = serializers.DictField(required=False, default=dict)
    comments = serializers.CharField(required=False, allow_blank=True, default='')


class ApprovalActionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=[(action, action.title()) for action in ACTIONS])
    comments = serializers.CharField(required=False, allow_blank=True, default='')
    escalation_reason = serializers.CharField(required=False, allow_blank=True, default='')
    escalate_to = serializers.UUIDField(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        if attrs['action'] == 'escalate' and not attrs.get('escalation_reason', '').strip():
            raise serializers.ValidationError({'escalation_reason': 'A reason is required to escalate.'})
        if attrs['action'] != 'escalate' and attrs.get('escalate_to'):
            raise serializers.ValidationError({'escalate_to': 'Only escalations can name a target.'})
        return attrs


class ApprovalAuditSerializer(serializers.ModelSerializer):
    actor_details = UserSummarySerializer(source='actor', read_only=True)

    class Meta:
        model = ApprovalAudit
        fields = [
            'id', 'sequence', 'action', 'actor', 'actor_details', 'assignee',
            'step_id', 'step_name', 'step_order', 'comments', 'metadata', 'created_at',
        ]
        read_only_fields = fields


class ApplicableWorkflowQuerySerializer(serializers.Serializer):
    company = TenantCompanyField()
    entity_type = serializers.ChoiceField(choices=ENTITY_TYPE_CHOICES)
    entity_sub_type = serializers.CharField(required=False, allow_blank=True, default='')
    amount = serializers.DecimalField(max_digits=18, decimal_places=2, required=False, allow_null=True, default=None)


class DashboardQuerySerializer(serializers.Serializer):
    company = TenantCompanyField(required=False, allow_null=True, default=None)
    date_from = serializers.DateField(required=False, allow_null=True, default=None)
    date_to = serializers.DateField(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        if attrs.get('date_from') and attrs.get('date_to') and attrs['date_from'] > attrs['date_to']:
            raise serializers.ValidationError({'date_to': 'date_to must not be before date_from.'})
        return attrs


class DashboardSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    pending = serializers.IntegerField()
    approved = serializers.IntegerField()
    rejected = serializers.IntegerField()
    approval_rate = serializers.FloatField()
    average_processing_hours = serializers.FloatField()
    by_entity_type = serializers.DictField(child=serializers.IntegerField())
    recent = ApprovalRequestListSerializer(many=True)


__all__ = [
    'ApprovalWorkflowSerializer',
    'ApprovalAssigneeSerializer',
    'ApprovalRequestListSerializer',
    'ApprovalRequestSerializer',
    'ApprovalRequestCreateSerializer',
    'ApprovalActionSerializer',
    'ApprovalAuditSerializer',
    'ApplicableWorkflowQuerySerializer',
    'DashboardQuerySerializer',
    'DashboardSerializer',
]
