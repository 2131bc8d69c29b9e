"""
Approval ViewSets
"""

import uuid

from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.tenant_guards import OrganizationViewSetMixin, resolve_request_organization
from apps.core.throttling import ApprovalActionRateThrottle

from .filters import ApprovalRequestFilter, ApprovalWorkflowFilter
from .models import ApprovalAssignee, ApprovalRequest, ApprovalWorkflow
from .permissions import ApprovalsTenantPermission, IsApprovalAdminOrReadOnly, can_act_for_assignee
from .serializers import (
    ApplicableWorkflowQuerySerializer,
    ApprovalActionSerializer,
    ApprovalAuditSerializer,
    ApprovalRequestCreateSerializer,
    ApprovalRequestListSerializer,
    ApprovalRequestSerializer,
    ApprovalWorkflowSerializer,
    DashboardQuerySerializer,
    DashboardSerializer,
)
from .services import ApprovalDashboardService, ApprovalEngine

UUID_PATTERN = r'[0-9a-fA-F-]{32,36}'


def _as_uuid(value):
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class EngineMixin:
    def get_engine(self):
        return ApprovalEngine()

    @property
    def organization(self):
        return resolve_request_organization(self.request)


class ApprovalWorkflowViewSet(EngineMixin, OrganizationViewSetMixin, viewsets.ModelViewSet):
    """
    Approval workflow templates for the caller's organization.

    Read access for authenticated users, write only for org admins.
    Steps are frozen once any approval request uses the workflow.
    """
    queryset = ApprovalWorkflow.objects.all()
    serializer_class = ApprovalWorkflowSerializer
    permission_classes = [IsAuthenticated, ApprovalsTenantPermission, IsApprovalAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = ApprovalWorkflowFilter
    search_fields = ['name', 'description']
    ordering_fields = ['name', 'entity_type', 'priority', 'created_at']
    ordering = ['name']
    lookup_value_regex = UUID_PATTERN

    def get_queryset(self):
        return super().get_queryset().select_related('company')

    def perform_create(self, serializer):
        serializer.instance = self.get_engine().create_workflow(
            self.organization,
            serializer.validated_data['company'],
            serializer.to_config(),
            created_by=self.request.user,
        )

    def perform_update(self, serializer):
        serializer.instance = self.get_engine().update_workflow(
            serializer.instance,
            serializer.to_config(),
            updated_by=self.request.user,
        )

    def perform_destroy(self, instance):
        self.get_engine().delete_workflow(instance, deleted_by=self.request.user)

    @action(detail=False, methods=['get'])
    def applicable(self, request):
        """Workflows that would handle a new request, best match first"""
        query = ApplicableWorkflowQuerySerializer(data=request.query_params, context={'request': request})
        query.is_valid(raise_exception=True)
        params = query.validated_data
        metadata = None
        if params.get('amount') is not None:
            metadata = {'amount': str(params['amount'])}
        workflows = self.get_engine().get_workflows(
            self.organization,
            params['company'],
            params['entity_type'],
            params.get('entity_sub_type') or None,
            metadata=metadata,
        )
        return Response(self.get_serializer(workflows, many=True).data)


class ApprovalRequestViewSet(
    EngineMixin,
    OrganizationViewSetMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Approval requests of the caller's organization.

    Actions are taken per assignee row; only the assigned user (or an
    org admin) may act on it.
    """
    queryset = ApprovalRequest.objects.all()
    serializer_class = ApprovalRequestSerializer
    permission_classes = [IsAuthenticated, ApprovalsTenantPermission]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = ApprovalRequestFilter
    search_fields = ['entity_id', 'comments']
    ordering_fields = ['status', 'entity_type', 'requested_at', 'approved_at', 'rejected_at']
    ordering = ['-requested_at']
    lookup_value_regex = UUID_PATTERN

    def get_queryset(self):
        queryset = super().get_queryset().select_related('workflow', 'company', 'requested_by')
        if self.action == 'retrieve':
            queryset = queryset.prefetch_related('assignees__user', 'assignees__escalated_to')
        return queryset

    def get_serializer_class(self):
        if self.action in ('list', 'my_pending'):
            return ApprovalRequestListSerializer
        return super().get_serializer_class()

    def create(self, request, *args, **kwargs):
        serializer = ApprovalRequestCreateSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        approval_request = self.get_engine().create_approval_request(
            self.organization,
            data['company'],
            data['entity_type'],
            data['entity_id'],
            requested_by=request.user,
            entity_sub_type=data.get('entity_sub_type') or None,
            metadata=data.get('metadata') or {},
            comments=data.get('comments', ''),
        )
        return Response(ApprovalRequestSerializer(approval_request).data, status=status.HTTP_201_CREATED)

    @action(
        detail=True,
        methods=['post'],
        url_path=r'assignees/(?P<assignee_id>[^/.]+)/action',
        url_name='assignee-action',
        throttle_classes=[ApprovalActionRateThrottle],
    )
    def assignee_action(self, request, pk=None, assignee_id=None):
        """Approve, reject or escalate on behalf of one assignee"""
        serializer = ApprovalActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        request_uuid, assignee_uuid = _as_uuid(pk), _as_uuid(assignee_id)
        if request_uuid and assignee_uuid:
            assignee = ApprovalAssignee.objects.filter(
                organization=self.organization,
                approval_request_id=request_uuid,
                id=assignee_uuid,
            ).first()
            if assignee is not None and not can_act_for_assignee(request.user, assignee):
                raise PermissionDenied('You are not the assigned approver for this step.')

        data = serializer.validated_data
        approval_request = self.get_engine().process_approval_action(
            self.organization,
            pk,
            assignee_id,
            data['action'],
            comments=data.get('comments', ''),
            escalation_reason=data.get('escalation_reason', ''),
            escalate_to=data.get('escalate_to'),
            actor=request.user,
        )
        return Response(ApprovalRequestSerializer(approval_request).data)

    @action(detail=True, methods=['get'])
    def history(self, request, pk=None):
        """Audit trail of a request in sequence order"""
        approval_request = self.get_object()
        entries = approval_request.audit_trail.select_related('actor').order_by('sequence')
        return Response(ApprovalAuditSerializer(entries, many=True).data)

    @action(detail=False, methods=['get'], url_path='my-pending')
    def my_pending(self, request):
        """Requests waiting on the caller"""
        queryset = self.filter_queryset(self.get_engine().pending_requests_for(self.organization, request.user))
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(queryset, many=True).data)

    @action(detail=False, methods=['get'])
    def dashboard(self, request):
        query = DashboardQuerySerializer(data=request.query_params, context={'request': request})
        query.is_valid(raise_exception=True)
        summary = ApprovalDashboardService.summary(self.organization, **query.validated_data)
        return Response(DashboardSerializer(summary).data)
