"""Approval Models - Unified multi-step approval engine"""
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone

from apps.core.models import OrganizationEntity, MetadataModel
from apps.approvals.definitions import (
    ENTITY_TYPE_CHOICES,
    PRIORITY_CHOICES,
    decode_conditions,
    decode_escalation_rules,
    decode_steps,
)


class ApprovalWorkflow(OrganizationEntity):
    """Reusable approval template for one entity type inside a company"""

    company = models.ForeignKey('core.Company', on_delete=models.CASCADE, related_name='approval_workflows')
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)

    entity_type = models.CharField(max_length=30, choices=ENTITY_TYPE_CHOICES, db_index=True)
    # Blank sub type matches any sub type of the entity
    entity_sub_type = models.CharField(max_length=100, blank=True, default='')

    # Typed documents, always read through apps.approvals.definitions
    steps = models.JSONField(default=list)
    conditions = models.JSONField(default=list, blank=True)
    escalation_rules = models.JSONField(default=list, blank=True)

    auto_approval = models.BooleanField(default=False)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='medium')

    class Meta:
        db_table = 'approval_workflows'
        ordering = ['name']
        indexes = [
            models.Index(fields=['organization', 'company', 'entity_type'], name='apwf_org_company_type_idx'),
            models.Index(fields=['organization', 'created_at'], name='apwf_org_created_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.entity_type})"

    @property
    def step_definitions(self):
        return decode_steps(self.steps)

    @property
    def condition_definitions(self):
        return decode_conditions(self.conditions)

    @property
    def escalation_rule_definitions(self):
        return decode_escalation_rules(self.escalation_rules)

    def step_at(self, position):
        """Return the step at a 1-based position in the ordered step list."""
        steps = self.step_definitions
        if 1 <= position <= len(steps):
            return steps[position - 1]
        return None

    def escalation_rule_for(self, step_id):
        for rule in self.escalation_rule_definitions:
            if rule.step_id == step_id:
                return rule
        return None

    def clean(self):
        if self.company_id and self.organization_id:
            if self.company.organization_id != self.organization_id:
                raise ValidationError("Workflow company must belong to the workflow organization.")


class ApprovalRequest(OrganizationEntity, MetadataModel):
    """A business document travelling through a workflow"""

    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    company = models.ForeignKey('core.Company', on_delete=models.CASCADE, related_name='approval_requests')
    workflow = models.ForeignKey(ApprovalWorkflow, on_delete=models.PROTECT, related_name='requests')

    entity_type = models.CharField(max_length=30, choices=ENTITY_TYPE_CHOICES)
    entity_id = models.CharField(max_length=64)
    entity_sub_type = models.CharField(max_length=100, blank=True, default='')

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    # 1-based position in the workflow's ordered steps
    current_step = models.PositiveSmallIntegerField(default=1)
    total_steps = models.PositiveSmallIntegerField(default=0)
    completed_steps = models.PositiveSmallIntegerField(default=0)

    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='approval_requests'
    )
    requested_at = models.DateTimeField(default=timezone.now)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    comments = models.TextField(blank=True)

    class Meta:
        db_table = 'approval_requests'
        ordering = ['-requested_at']
        indexes = [
            models.Index(fields=['organization', 'entity_id'], name='apreq_org_entity_idx'),
            models.Index(fields=['organization', 'status'], name='apreq_org_status_idx'),
            models.Index(fields=['organization', 'company'], name='apreq_org_company_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(approved_at__isnull=False, rejected_at__isnull=False),
                name='approval_request_single_verdict',
            ),
        ]

    def __str__(self):
        return f"{self.entity_type}:{self.entity_id} - {self.status}"

    @property
    def is_pending(self):
        return self.status == self.STATUS_PENDING

    @property
    def current_step_definition(self):
        if not self.is_pending:
            return None
        return self.workflow.step_at(self.current_step)


class ApprovalAssignee(OrganizationEntity):
    """An approver's slot on one step of a request"""

    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_ESCALATED = 'escalated'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_ESCALATED, 'Escalated'),
    ]

    approval_request = models.ForeignKey(ApprovalRequest, on_delete=models.CASCADE, related_name='assignees')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='approval_assignments'
    )
    step_id = models.CharField(max_length=100)
    step_name = models.CharField(max_length=200)
    step_order = models.PositiveSmallIntegerField()

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    assigned_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)
    comments = models.TextField(blank=True)

    escalated_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approval_escalations_received',
    )
    escalation_reason = models.TextField(blank=True)
    escalated_from = models.ForeignKey(
        'self', on_delete=models.SET_NULL, null=True, blank=True, related_name='escalated_assignees'
    )
    escalation_notified_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'approval_assignees'
        ordering = ['step_order', 'assigned_at']
        constraints = [
            models.UniqueConstraint(
                fields=['approval_request', 'step_id', 'user'],
                name='uniq_assignee_per_request_step',
            ),
        ]
        indexes = [
            models.Index(fields=['organization', 'user', 'status'], name='apasg_org_user_status_idx'),
        ]

    def __str__(self):
        return f"{self.user_id} @ {self.step_name} ({self.status})"

    def clean(self):
        if self.approval_request_id and self.organization_id:
            if self.approval_request.organization_id != self.organization_id:
                raise ValidationError("Assignee organization must match its approval request.")


class ApprovalAudit(OrganizationEntity):
    """Append-only history of everything that happened to a request"""

    ACTION_CHOICES = [
        ('created', 'Created'),
        ('step_assigned', 'Step Assigned'),
        ('step_skipped', 'Step Skipped'),
        ('step_completed', 'Step Completed'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
        ('escalated', 'Escalated'),
        ('completed', 'Completed'),
        ('auto_approved', 'Auto Approved'),
    ]

    approval_request = models.ForeignKey(ApprovalRequest, on_delete=models.CASCADE, related_name='audit_trail')
    sequence = models.PositiveIntegerField()
    action = models.CharField(max_length=20, choices=ACTION_CHOICES)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approval_audit_entries',
    )
    assignee = models.ForeignKey(
        ApprovalAssignee, on_delete=models.SET_NULL, null=True, blank=True, related_name='audit_entries'
    )
    step_id = models.CharField(max_length=100, blank=True)
    step_name = models.CharField(max_length=200, blank=True)
    step_order = models.PositiveSmallIntegerField(null=True, blank=True)
    comments = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)

    class Meta:
        db_table = 'approval_audit'
        ordering = ['approval_request', 'sequence']
        constraints = [
            models.UniqueConstraint(
                fields=['approval_request', 'sequence'],
                name='uniq_audit_sequence_per_request',
            ),
        ]

    def __str__(self):
        return f"#{self.sequence} {self.action}"
