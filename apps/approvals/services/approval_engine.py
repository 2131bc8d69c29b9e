"""Unified approval engine: workflow store and request state machine"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.db.models import Max, Q
from django.utils import timezone

from apps.approvals.definitions import (
    APPROVER_AMOUNT,
    ESCALATE_TO_SPECIFIC_USER,
    PRIORITY_RANK,
    StepDefinition,
    decode_steps,
    encode_steps,
    normalize_workflow_config,
    parse_decimal,
)
from apps.approvals.exceptions import (
    AlreadyProcessed,
    ConditionsNotMet,
    InvalidConfiguration,
    NoWorkflowFound,
    NotFound,
    WorkflowInUse,
)
from apps.approvals.models import ApprovalAssignee, ApprovalAudit, ApprovalRequest, ApprovalWorkflow
from apps.core.exceptions import ValidationException
from apps.core.models import Company
from .approver_resolver import ApproverResolver
from .conditions import ConditionEvaluator
from .entity_status import APPROVED, REJECTED, default_registry
from .notifier import NotificationServiceNotifier
from .user_directory import DjangoUserDirectory

logger = logging.getLogger(__name__)

ACTION_APPROVE = 'approve'
ACTION_REJECT = 'reject'
ACTION_ESCALATE = 'escalate'
ACTIONS = (ACTION_APPROVE, ACTION_REJECT, ACTION_ESCALATE)


def _pk(value):
    return getattr(value, 'pk', value)


def _as_uuid(value) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


@dataclass
class _Outcome:
    """Side effects collected inside the transaction and replayed after commit."""

    action: Optional[str] = None
    comments: str = ''
    new_assignees: List[ApprovalAssignee] = field(default_factory=list)
    verdict: Optional[str] = None


class ApprovalEngine:
    """
    Stateless approval service.

    All collaborators are injected so tests and other apps can swap user
    lookups, notifications, status write-back and condition evaluation.
    """

    def __init__(
        self,
        *,
        user_directory=None,
        notifier=None,
        entity_status=None,
        condition_evaluator=None,
        approver_resolver=None,
    ):
        self.user_directory = user_directory or DjangoUserDirectory()
        self.notifier = notifier or NotificationServiceNotifier()
        self.entity_status = entity_status or default_registry
        self.condition_evaluator = condition_evaluator or ConditionEvaluator()
        self.approver_resolver = approver_resolver or ApproverResolver(self.user_directory)

    # ----------------------------------------------------------- workflow store
    def create_workflow(self, organization, company, config: Dict[str, Any], created_by=None) -> ApprovalWorkflow:
        company = self._company(organization, company)
        values = normalize_workflow_config(config)
        workflow = ApprovalWorkflow.objects.create(
            organization_id=_pk(organization),
            company=company,
            created_by=created_by,
            updated_by=created_by,
            **values,
        )
        logger.info(
            "Approval workflow %s created for %s in company %s",
            workflow.id, workflow.entity_type, company.id,
        )
        return workflow

    def update_workflow(self, workflow: ApprovalWorkflow, changes: Dict[str, Any], updated_by=None) -> ApprovalWorkflow:
        with transaction.atomic():
            workflow = ApprovalWorkflow.objects.select_for_update().get(pk=workflow.pk)
            config = {**self.workflow_config(workflow), **changes}
            values = normalize_workflow_config(config)
            current_steps = encode_steps(decode_steps(workflow.steps))
            if values['steps'] != current_steps and workflow.requests.exists():
                raise WorkflowInUse(
                    "Workflow steps cannot change once approval requests reference the workflow",
                    details={'workflow_id': str(workflow.id)},
                )
            for attr, value in values.items():
                setattr(workflow, attr, value)
            workflow.updated_by = updated_by
            workflow.save()
        logger.info("Approval workflow %s updated", workflow.id)
        return workflow

    def delete_workflow(self, workflow: ApprovalWorkflow, deleted_by=None) -> None:
        with transaction.atomic():
            workflow = ApprovalWorkflow.objects.select_for_update().get(pk=workflow.pk)
            if workflow.requests.filter(status=ApprovalRequest.STATUS_PENDING).exists():
                raise WorkflowInUse(
                    "Workflow has pending approval requests",
                    details={'workflow_id': str(workflow.id)},
                )
            workflow.delete(deleted_by=deleted_by)
        logger.info("Approval workflow %s deleted", workflow.id)

    @staticmethod
    def workflow_config(workflow: ApprovalWorkflow) -> Dict[str, Any]:
        return {
            'name': workflow.name,
            'description': workflow.description,
            'entity_type': workflow.entity_type,
            'entity_sub_type': workflow.entity_sub_type,
            'steps': workflow.steps,
            'conditions': workflow.conditions,
            'escalation_rules': workflow.escalation_rules,
            'auto_approval': workflow.auto_approval,
            'priority': workflow.priority,
            'is_active': workflow.is_active,
        }

    def get_workflows(
        self,
        organization,
        company,
        entity_type: str,
        entity_sub_type: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> List[ApprovalWorkflow]:
        """Applicable workflows, best match first."""
        queryset = ApprovalWorkflow.objects.filter(
            organization_id=_pk(organization),
            company_id=_pk(company),
            entity_type=entity_type,
            is_active=True,
        )
        if entity_sub_type:
            queryset = queryset.filter(Q(entity_sub_type=entity_sub_type) | Q(entity_sub_type=''))
        else:
            queryset = queryset.filter(entity_sub_type='')

        workflows = sorted(
            queryset,
            key=lambda wf: (
                0 if wf.entity_sub_type else 1,
                -PRIORITY_RANK.get(wf.priority, PRIORITY_RANK['medium']),
                wf.created_at,
                str(wf.id),
            ),
        )
        if metadata is not None:
            context = self._context(entity_type, None, entity_sub_type, metadata)
            workflows = [
                wf for wf in workflows
                if self.condition_evaluator.evaluate(wf.condition_definitions, context)
            ]
        return workflows

    # ----------------------------------------------------------- requests
    def get_approval_request(self, organization, request_id) -> ApprovalRequest:
        request_uuid = _as_uuid(request_id)
        approval_request = None
        if request_uuid is not None:
            approval_request = (
                ApprovalRequest.objects.select_related('workflow', 'company', 'requested_by')
                .prefetch_related('assignees__user')
                .filter(organization_id=_pk(organization), id=request_uuid)
                .first()
            )
        if approval_request is None:
            raise NotFound('Approval request', request_id)
        return approval_request

    def pending_requests_for(self, organization, user):
        return (
            ApprovalRequest.objects.filter(
                organization_id=_pk(organization),
                status=ApprovalRequest.STATUS_PENDING,
                assignees__user=user,
                assignees__status=ApprovalAssignee.STATUS_PENDING,
                assignees__is_deleted=False,
            )
            .select_related('workflow', 'company', 'requested_by')
            .prefetch_related('assignees__user')
            .distinct()
        )

    def create_approval_request(
        self,
        organization,
        company,
        entity_type: str,
        entity_id,
        requested_by,
        entity_sub_type: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        comments: str = '',
    ) -> ApprovalRequest:
        company = self._company(organization, company)
        if requested_by is None or str(requested_by.organization_id) != str(_pk(organization)):
            raise ValidationException("Requester must belong to the organization", field='requested_by')
        entity_id = str(entity_id or '').strip()
        if not entity_id:
            raise ValidationException("entity_id is required", field='entity_id')
        metadata = dict(metadata or {})

        workflows = self.get_workflows(organization, company, entity_type, entity_sub_type)
        if not workflows:
            raise NoWorkflowFound(
                f"No active approval workflow for {entity_type}",
                details={'entity_type': entity_type, 'entity_sub_type': entity_sub_type, 'company': str(company.id)},
            )
        workflow = workflows[0]

        context = self._context(entity_type, entity_id, entity_sub_type, metadata)
        if not self.condition_evaluator.evaluate(workflow.condition_definitions, context):
            raise ConditionsNotMet(
                f"Approval workflow '{workflow.name}' conditions are not met",
                details={'workflow_id': str(workflow.id)},
            )
        steps = workflow.step_definitions
        if not workflow.auto_approval:
            self._require_amount(steps, metadata)

        outcome = _Outcome()
        with transaction.atomic():
            approval_request = ApprovalRequest.objects.create(
                organization_id=_pk(organization),
                company=company,
                workflow=workflow,
                entity_type=entity_type,
                entity_id=entity_id,
                entity_sub_type=entity_sub_type or '',
                status=ApprovalRequest.STATUS_PENDING,
                current_step=1,
                total_steps=len(steps),
                completed_steps=0,
                requested_by=requested_by,
                comments=comments or '',
                metadata=metadata,
                created_by=requested_by,
                updated_by=requested_by,
            )
            self._audit(
                approval_request, 'created', actor=requested_by, comments=comments,
                metadata={'workflow_id': str(workflow.id), 'total_steps': len(steps)},
            )
            if workflow.auto_approval:
                self._mark_approved(approval_request, outcome, actor=requested_by, action='auto_approved')
            else:
                self._activate_step(approval_request, steps, 1, context, outcome, actor=requested_by)

        if outcome.verdict:
            outcome.action = outcome.verdict
        logger.info(
            "Approval request %s created for %s:%s using workflow %s (status=%s)",
            approval_request.id, entity_type, entity_id, workflow.id, approval_request.status,
        )
        self._after_commit(approval_request, outcome)
        return self.get_approval_request(organization, approval_request.id)

    def process_approval_action(
        self,
        organization,
        approval_request_id,
        assignee_id,
        action: str,
        comments: str = '',
        escalation_reason: str = '',
        escalate_to=None,
        actor=None,
    ) -> ApprovalRequest:
        if action not in ACTIONS:
            raise ValidationException(f"Unsupported approval action: {action}", field='action')

        outcome = _Outcome(action=action, comments=comments or '')
        with transaction.atomic():
            request_uuid = _as_uuid(approval_request_id)
            approval_request = None
            if request_uuid is not None:
                approval_request = (
                    ApprovalRequest.objects.select_for_update()
                    .filter(organization_id=_pk(organization), id=request_uuid)
                    .first()
                )
            if approval_request is None:
                raise NotFound('Approval request', approval_request_id)

            assignee_uuid = _as_uuid(assignee_id)
            assignee = None
            if assignee_uuid is not None:
                assignee = (
                    approval_request.assignees.select_for_update()
                    .select_related('user')
                    .filter(id=assignee_uuid)
                    .first()
                )
            if assignee is None:
                raise NotFound('Approval assignee', assignee_id)

            if assignee.status != ApprovalAssignee.STATUS_PENDING:
                raise AlreadyProcessed(
                    f"Assignee has already {assignee.status} this request",
                    details={'assignee_id': str(assignee.id), 'status': assignee.status},
                )
            if approval_request.status != ApprovalRequest.STATUS_PENDING:
                raise AlreadyProcessed(
                    f"Approval request is already {approval_request.status}",
                    details={'approval_request_id': str(approval_request.id), 'status': approval_request.status},
                )

            actor = actor or assignee.user
            now = timezone.now()
            if action == ACTION_REJECT:
                self._reject(approval_request, assignee, outcome, actor, comments, now)
            elif action == ACTION_APPROVE:
                self._approve(approval_request, assignee, outcome, actor, comments, now)
            else:
                self._escalate(
                    approval_request, assignee, outcome, actor, comments, escalation_reason, escalate_to, now
                )

        logger.info(
            "Approval request %s: %s by %s on step %s (status=%s)",
            approval_request.id, action, _pk(actor), assignee.step_id, approval_request.status,
        )
        self._after_commit(approval_request, outcome)
        return self.get_approval_request(organization, approval_request.id)

    def resolve_escalation_target(self, approval_request: ApprovalRequest, assignee: ApprovalAssignee):
        """Escalation target for an assignee per the workflow rule of its step, or None."""
        rule = approval_request.workflow.escalation_rule_for(assignee.step_id)
        if rule is None:
            return None
        organization_id = approval_request.organization_id
        if rule.escalate_to == ESCALATE_TO_SPECIFIC_USER:
            user = self.user_directory.find_user_by_id(organization_id, rule.escalate_to_user_id)
            if user is not None and user.id != assignee.user_id:
                return user
            return None
        for user in self.user_directory.find_users_by_role(organization_id, [rule.escalate_to]):
            if user.id != assignee.user_id:
                return user
        return None

    # ----------------------------------------------------------- transitions
    def _reject(self, approval_request, assignee, outcome, actor, comments, now):
        assignee.status = ApprovalAssignee.STATUS_REJECTED
        assignee.completed_at = now
        assignee.comments = comments or ''
        assignee.updated_by = actor
        assignee.save(update_fields=['status', 'completed_at', 'comments', 'updated_by', 'updated_at'])

        approval_request.status = ApprovalRequest.STATUS_REJECTED
        approval_request.rejected_at = now
        approval_request.updated_by = actor
        approval_request.save(update_fields=['status', 'rejected_at', 'updated_by', 'updated_at'])
        self._audit(approval_request, 'rejected', actor=actor, assignee=assignee, comments=comments)
        outcome.verdict = REJECTED

    def _approve(self, approval_request, assignee, outcome, actor, comments, now):
        assignee.status = ApprovalAssignee.STATUS_APPROVED
        assignee.completed_at = now
        assignee.comments = comments or ''
        assignee.updated_by = actor
        assignee.save(update_fields=['status', 'completed_at', 'comments', 'updated_by', 'updated_at'])
        self._audit(approval_request, 'approved', actor=actor, assignee=assignee, comments=comments)

        step_assignees = approval_request.assignees.filter(step_id=assignee.step_id)
        if step_assignees.filter(status=ApprovalAssignee.STATUS_PENDING).exists():
            return
        if not step_assignees.filter(status=ApprovalAssignee.STATUS_APPROVED).exists():
            return

        approval_request.completed_steps += 1
        approval_request.updated_by = actor
        self._audit(
            approval_request, 'step_completed', actor=actor,
            step_id=assignee.step_id, step_name=assignee.step_name, step_order=assignee.step_order,
        )
        steps = approval_request.workflow.step_definitions
        context = self._context(
            approval_request.entity_type,
            approval_request.entity_id,
            approval_request.entity_sub_type,
            approval_request.metadata,
        )
        self._activate_step(approval_request, steps, approval_request.current_step + 1, context, outcome, actor=actor)

    def _escalate(self, approval_request, assignee, outcome, actor, comments, reason, escalate_to, now):
        organization_id = approval_request.organization_id
        if escalate_to:
            target = self.user_directory.find_user_by_id(organization_id, _pk(escalate_to))
            if target is None:
                raise NotFound('User', _pk(escalate_to))
            if target.id == assignee.user_id:
                raise ValidationException("Cannot escalate to the current assignee", field='escalate_to')
        else:
            target = self.resolve_escalation_target(approval_request, assignee)

        step_assignees = approval_request.assignees.filter(step_id=assignee.step_id)
        others_pending = (
            step_assignees.filter(status=ApprovalAssignee.STATUS_PENDING).exclude(id=assignee.id).exists()
        )
        already_on_step = target is not None and step_assignees.filter(user_id=target.id).exists()
        if not others_pending and (target is None or already_on_step):
            raise InvalidConfiguration(
                f"No escalation target available for step '{assignee.step_name}'",
                details={'step_id': assignee.step_id},
            )

        assignee.status = ApprovalAssignee.STATUS_ESCALATED
        assignee.completed_at = now
        assignee.comments = comments or ''
        assignee.escalated_to = target
        assignee.escalation_reason = reason or ''
        assignee.updated_by = actor
        assignee.save(update_fields=[
            'status', 'completed_at', 'comments', 'escalated_to', 'escalation_reason', 'updated_by', 'updated_at',
        ])

        if target is not None and not already_on_step:
            outcome.new_assignees.append(ApprovalAssignee.objects.create(
                organization_id=organization_id,
                approval_request=approval_request,
                user=target,
                step_id=assignee.step_id,
                step_name=assignee.step_name,
                step_order=assignee.step_order,
                escalated_from=assignee,
                created_by=actor,
            ))

        approval_request.updated_by = actor
        approval_request.save(update_fields=['updated_by', 'updated_at'])
        self._audit(
            approval_request, 'escalated', actor=actor, assignee=assignee, comments=reason or comments,
            metadata={'escalated_to': str(target.id) if target is not None else None},
        )

    def _activate_step(self, approval_request, steps, position, context, outcome, actor=None):
        """Activate the step at ``position``; auto-satisfied steps are skipped."""
        while position <= len(steps):
            step: StepDefinition = steps[position - 1]
            approval_request.current_step = position

            skip_reason = None
            approvers = []
            if step.auto_approve:
                skip_reason = 'auto_approve'
            elif not self.condition_evaluator.evaluate(step.conditions, context):
                skip_reason = 'conditions_not_met'
            else:
                approvers = self.approver_resolver.resolve(
                    step=step,
                    organization_id=approval_request.organization_id,
                    metadata=approval_request.metadata,
                )
                if not approvers:
                    skip_reason = 'no_approvers'

            if skip_reason:
                approval_request.completed_steps += 1
                self._audit(
                    approval_request, 'step_skipped', actor=actor, step_id=step.id, step_name=step.name,
                    step_order=step.order, metadata={'reason': skip_reason},
                )
                position += 1
                continue

            created = [
                ApprovalAssignee.objects.create(
                    organization_id=approval_request.organization_id,
                    approval_request=approval_request,
                    user_id=approver.user_id,
                    step_id=step.id,
                    step_name=step.name,
                    step_order=step.order,
                    created_by=actor,
                )
                for approver in approvers
            ]
            outcome.new_assignees.extend(created)
            approval_request.save(update_fields=['current_step', 'completed_steps', 'updated_by', 'updated_at'])
            self._audit(
                approval_request, 'step_assigned', actor=actor, step_id=step.id, step_name=step.name,
                step_order=step.order, metadata={'assignees': [approver.user_id for approver in approvers]},
            )
            return

        approval_request.current_step = max(len(steps), 1)
        self._mark_approved(approval_request, outcome, actor=actor)

    def _mark_approved(self, approval_request, outcome, actor=None, action='completed'):
        approval_request.status = ApprovalRequest.STATUS_APPROVED
        approval_request.approved_at = timezone.now()
        approval_request.save(update_fields=[
            'status', 'approved_at', 'current_step', 'completed_steps', 'updated_by', 'updated_at',
        ])
        self._audit(approval_request, action, actor=actor)
        outcome.verdict = APPROVED

    # ----------------------------------------------------------- internals
    def _company(self, organization, company) -> Company:
        company_uuid = _as_uuid(_pk(company))
        found = None
        if company_uuid is not None:
            found = Company.objects.filter(id=company_uuid, organization_id=_pk(organization)).first()
        if found is None:
            raise NotFound('Company', _pk(company))
        return found

    @staticmethod
    def _require_amount(steps, metadata) -> None:
        """Amount based steps decide later; the amount must be usable from the start."""
        for step in steps:
            if step.approver_type != APPROVER_AMOUNT or step.auto_approve:
                continue
            if parse_decimal(metadata.get('amount'), 'metadata.amount') is None:
                raise InvalidConfiguration(
                    f"Step '{step.id}' requires metadata.amount for amount based approval",
                    details={'step_id': step.id},
                )

    @staticmethod
    def _context(entity_type, entity_id, entity_sub_type, metadata) -> Dict[str, Any]:
        context = {'entity_type': entity_type, 'entity_id': entity_id}
        if entity_sub_type:
            context['entity_sub_type'] = entity_sub_type
        context.update(metadata or {})
        return context

    def _audit(
        self,
        approval_request,
        action,
        *,
        actor=None,
        assignee=None,
        step_id=None,
        step_name=None,
        step_order=None,
        comments='',
        metadata=None,
    ) -> ApprovalAudit:
        last = approval_request.audit_trail.aggregate(last=Max('sequence'))['last'] or 0
        return ApprovalAudit.objects.create(
            organization_id=approval_request.organization_id,
            approval_request=approval_request,
            sequence=last + 1,
            action=action,
            actor=actor,
            assignee=assignee,
            step_id=step_id or (assignee.step_id if assignee else ''),
            step_name=step_name or (assignee.step_name if assignee else ''),
            step_order=step_order if step_order is not None else (assignee.step_order if assignee else None),
            comments=comments or '',
            metadata=metadata or {},
            created_by=actor,
        )

    def _after_commit(self, approval_request, outcome: _Outcome) -> None:
        if outcome.new_assignees:
            self._safely(
                'assignee notification', approval_request,
                self.notifier.notify_assignees, approval_request, outcome.new_assignees,
            )
        if outcome.action:
            self._safely(
                'action notification', approval_request,
                self.notifier.notify_action, approval_request, outcome.action, outcome.comments,
            )
        if outcome.verdict:
            self._safely(
                'entity status update', approval_request,
                self.entity_status.update,
                approval_request.entity_type, approval_request.entity_id, outcome.verdict,
                organization_id=approval_request.organization_id,
            )

    @staticmethod
    def _safely(label, approval_request, func, *args, **kwargs):
        try:
            with transaction.atomic():
                return func(*args, **kwargs)
        except Exception:
            logger.exception("Approval %s failed for request %s", label, approval_request.id)
            return None
