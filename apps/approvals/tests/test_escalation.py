"""
Escalation: manual escalation actions and overdue step reminders
"""
import uuid
from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from apps.approvals.exceptions import InvalidConfiguration, NotFound
from apps.approvals.models import ApprovalAssignee, ApprovalRequest
from apps.approvals.services import EscalationReminderService
from apps.approvals.tasks import send_escalation_reminders_task
from apps.core.exceptions import ValidationException
from apps.notifications.models import Notification

from .helpers import ApprovalSetupMixin

DIRECTOR_RULE = {'step_id': 'manager', 'escalate_to': 'director', 'escalation_hours': 4}


class EscalationActionTests(ApprovalSetupMixin, TestCase):

    def test_escalation_hands_step_to_rule_target(self):
        self.create_workflow(escalation_rules=[DIRECTOR_RULE])
        approval_request = self.submit()

        approval_request = self.act(approval_request, self.manager, 'escalate', escalation_reason='On leave')
        self.assertEqual(approval_request.status, ApprovalRequest.STATUS_PENDING)
        self.assertEqual(approval_request.current_step, 1)

        escalated = approval_request.assignees.get(user=self.manager)
        self.assertEqual(escalated.status, ApprovalAssignee.STATUS_ESCALATED)
        self.assertEqual(escalated.escalated_to, self.director)
        self.assertEqual(escalated.escalation_reason, 'On leave')

        replacement = self.pending_assignee(approval_request, self.director)
        self.assertEqual(replacement.escalated_from, escalated)
        self.assertEqual(replacement.step_id, 'manager')

        entry = approval_request.audit_trail.get(action='escalated')
        self.assertEqual(entry.metadata, {'escalated_to': str(self.director.id)})
        self.assertIn(('manager', self.director.id), self.notifier.assigned)

        approval_request = self.act(approval_request, self.director)
        self.assertEqual(approval_request.current_step, 2)
        self.assertEqual(approval_request.completed_steps, 1)

    def test_explicit_target_without_rule(self):
        self.create_workflow()
        approval_request = self.act(
            self.submit(), self.manager, 'escalate', escalation_reason='Needs CFO', escalate_to=self.cfo.id,
        )
        self.pending_assignee(approval_request, self.cfo)

    def test_escalation_without_target_rejected(self):
        self.create_workflow()
        approval_request = self.submit()
        with self.assertRaises(InvalidConfiguration):
            self.act(approval_request, self.manager, 'escalate', escalation_reason='Busy')
        self.pending_assignee(approval_request, self.manager)

    def test_cannot_escalate_to_self(self):
        self.create_workflow()
        with self.assertRaises(ValidationException):
            self.act(self.submit(), self.manager, 'escalate', escalation_reason='x', escalate_to=self.manager.id)

    def test_unknown_target_not_found(self):
        self.create_workflow()
        with self.assertRaises(NotFound):
            self.act(self.submit(), self.manager, 'escalate', escalation_reason='x', escalate_to=uuid.uuid4())


class EscalationReminderTests(ApprovalSetupMixin, TestCase):

    def age_assignees(self, approval_request, hours):
        approval_request.assignees.update(assigned_at=timezone.now() - timedelta(hours=hours))

    def test_overdue_assignee_reminded_once(self):
        self.create_workflow(escalation_rules=[DIRECTOR_RULE])
        approval_request = self.submit()
        self.age_assignees(approval_request, 5)
        service = EscalationReminderService(self.engine)

        self.assertEqual(service.send_reminders(self.org), 1)
        assignee = self.pending_assignee(approval_request, self.manager)
        self.assertEqual(self.notifier.escalations, [(assignee.id, self.director.id)])
        self.assertIsNotNone(assignee.escalation_notified_at)
        self.assertEqual(assignee.status, ApprovalAssignee.STATUS_PENDING)

        self.assertEqual(service.send_reminders(self.org), 0)

    def test_not_yet_due(self):
        self.create_workflow(escalation_rules=[DIRECTOR_RULE])
        self.age_assignees(self.submit(), 3)
        self.assertEqual(EscalationReminderService(self.engine).send_reminders(self.org), 0)

    def test_step_hours_used_when_rule_has_none(self):
        config = self.two_step_config()
        config['steps'][0]['escalation_hours'] = 2
        self.engine.create_workflow(
            self.org, self.company,
            {**config, 'escalation_rules': [{'step_id': 'manager', 'escalate_to': 'ceo'}]},
        )
        self.age_assignees(self.submit(), 3)
        self.assertEqual(EscalationReminderService(self.engine).send_reminders(self.org), 1)
        # No ceo in the organization: the assignee is reminded instead.
        self.assertEqual(self.notifier.escalations[0][1], None)

    def test_steps_without_rule_are_not_reminded(self):
        config = self.two_step_config()
        config['steps'][0]['escalation_hours'] = 1
        self.engine.create_workflow(self.org, self.company, config)
        self.age_assignees(self.submit(), 10)
        self.assertEqual(EscalationReminderService(self.engine).send_reminders(self.org), 0)

    def test_task_notifies_target(self):
        self.create_workflow(escalation_rules=[DIRECTOR_RULE])
        approval_request = self.submit()
        self.age_assignees(approval_request, 8)

        result = send_escalation_reminders_task(organization_id=str(self.org.id))

        self.assertEqual(result, {str(self.org.id): 1})
        notification = Notification.objects.get(recipient=self.director)
        self.assertEqual(notification.metadata['event'], 'escalation_due')
        self.assertEqual(notification.entity_type, 'approval_request')
        self.assertEqual(notification.entity_id, str(approval_request.id))
