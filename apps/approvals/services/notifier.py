"""Approval notifications"""
from __future__ import annotations

import logging

from django.conf import settings

from apps.notifications.services import NotificationService

logger = logging.getLogger(__name__)

WORKFLOW_TO_NOTIFICATION_PRIORITY = {
    'low': 'low',
    'medium': 'normal',
    'high': 'high',
    'critical': 'critical',
}


class ApprovalNotifier:
    """Notification hooks called by the engine after commit. Defaults do nothing."""

    def notify_assignees(self, approval_request, assignees):
        pass

    def notify_action(self, approval_request, action, comments=''):
        pass

    def notify_escalation_due(self, approval_request, assignee, target):
        pass


class NotificationServiceNotifier(ApprovalNotifier):
    """Writes notifications through the notifications app."""

    @property
    def channel(self):
        return getattr(settings, 'APPROVAL_NOTIFICATION_CHANNEL', 'in_app')

    def _send(self, approval_request, *, user, subject, body, event, **extra):
        return NotificationService.notify(
            user=user,
            subject=subject,
            body=body,
            organization_id=approval_request.organization_id,
            channel=self.channel,
            entity_type='approval_request',
            entity_id=approval_request.id,
            priority=WORKFLOW_TO_NOTIFICATION_PRIORITY.get(approval_request.workflow.priority, 'normal'),
            metadata={
                'event': event,
                'entity_type': approval_request.entity_type,
                'entity_id': approval_request.entity_id,
                **extra,
            },
        )

    def notify_assignees(self, approval_request, assignees):
        label = approval_request.get_entity_type_display()
        for assignee in assignees:
            self._send(
                approval_request,
                user=assignee.user,
                subject=f"Approval required: {label} {approval_request.entity_id}",
                body=f"You have been assigned to step '{assignee.step_name}' of {approval_request.workflow.name}.",
                event='assigned',
                step_id=assignee.step_id,
                assignee_id=str(assignee.id),
            )

    def notify_action(self, approval_request, action, comments=''):
        label = approval_request.get_entity_type_display()
        subject = f"{label} {approval_request.entity_id}: {action}"
        if approval_request.status != approval_request.STATUS_PENDING:
            subject = f"{label} {approval_request.entity_id} {approval_request.status}"
        self._send(
            approval_request,
            user=approval_request.requested_by,
            subject=subject,
            body=comments or '',
            event=action,
            status=approval_request.status,
        )

    def notify_escalation_due(self, approval_request, assignee, target):
        label = approval_request.get_entity_type_display()
        recipients = [target] if target is not None else []
        if not recipients:
            recipients = [assignee.user]
            logger.info("No escalation target for assignee %s; reminding the assignee", assignee.id)
        for user in recipients:
            self._send(
                approval_request,
                user=user,
                subject=f"Escalation: {label} {approval_request.entity_id} awaits a decision",
                body=f"Step '{assignee.step_name}' has been pending since {assignee.assigned_at:%Y-%m-%d %H:%M}.",
                event='escalation_due',
                step_id=assignee.step_id,
                assignee_id=str(assignee.id),
            )
