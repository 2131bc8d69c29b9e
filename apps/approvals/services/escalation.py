"""Escalation reminders for stalled approval steps"""
from __future__ import annotations

import logging
from datetime import timedelta

from django.utils import timezone

from apps.approvals.models import ApprovalAssignee, ApprovalRequest

logger = logging.getLogger(__name__)


class EscalationReminderService:
    """
    Notify escalation targets about assignees waiting longer than their
    step's escalation window. Approval state is never changed here; each
    assignee is reminded once.
    """

    def __init__(self, engine):
        self.engine = engine

    def due_assignees(self, organization, now=None):
        now = now or timezone.now()
        pending = (
            ApprovalAssignee.objects.filter(
                organization=organization,
                status=ApprovalAssignee.STATUS_PENDING,
                escalation_notified_at__isnull=True,
                approval_request__status=ApprovalRequest.STATUS_PENDING,
            )
            .select_related('approval_request__workflow', 'user')
            .order_by('assigned_at')
        )
        for assignee in pending:
            hours = self._escalation_hours(assignee)
            if hours and assignee.assigned_at + timedelta(hours=hours) <= now:
                yield assignee

    def send_reminders(self, organization, now=None) -> int:
        now = now or timezone.now()
        sent = 0
        for assignee in list(self.due_assignees(organization, now=now)):
            approval_request = assignee.approval_request
            target = self.engine.resolve_escalation_target(approval_request, assignee)
            self.engine.notifier.notify_escalation_due(approval_request, assignee, target)
            ApprovalAssignee.objects.filter(pk=assignee.pk).update(escalation_notified_at=now)
            sent += 1
        if sent:
            logger.info("Sent %s escalation reminders for organization %s", sent, organization.id)
        return sent

    @staticmethod
    def _escalation_hours(assignee):
        workflow = assignee.approval_request.workflow
        rule = workflow.escalation_rule_for(assignee.step_id)
        if rule is None:
            return None
        if rule.escalation_hours:
            return rule.escalation_hours
        for step in workflow.step_definitions:
            if step.id == assignee.step_id:
                return step.escalation_hours
        return None
