"""Shared fixtures for approval tests"""
from apps.approvals.services import ApprovalEngine, ApprovalNotifier, EntityStatusRegistry
from apps.authentication.models import UserRole
from tests.factories import CompanyFactory, UserFactory


class RecordingNotifier(ApprovalNotifier):
    def __init__(self):
        self.assigned = []
        self.actions = []
        self.escalations = []
        self.calls = []

    def notify_assignees(self, approval_request, assignees):
        self.assigned.extend((assignee.step_id, assignee.user_id) for assignee in assignees)
        self.calls.append(('assigned', [assignee.step_id for assignee in assignees]))

    def notify_action(self, approval_request, action, comments=''):
        self.actions.append(action)
        self.calls.append(('action', action))

    def notify_escalation_due(self, approval_request, assignee, target):
        self.escalations.append((assignee.id, getattr(target, 'id', None)))


class RecordingRegistry(EntityStatusRegistry):
    def __init__(self):
        super().__init__()
        self.updates = []

    def update(self, entity_type, entity_id, verdict, *, organization_id):
        self.updates.append((entity_type, entity_id, verdict))
        return True


class ApprovalSetupMixin:
    """Organization with one company and a user per approval role."""

    def setUp(self):
        super().setUp()
        self.company = CompanyFactory()
        self.org = self.company.organization
        self.requester = UserFactory(organization=self.org, role=UserRole.CLERK, email='clerk@example.com')
        self.manager = UserFactory(organization=self.org, role=UserRole.MANAGER, email='manager@example.com')
        self.director = UserFactory(organization=self.org, role=UserRole.DIRECTOR, email='director@example.com')
        self.cfo = UserFactory(organization=self.org, role=UserRole.CFO, email='cfo@example.com')
        self.admin = UserFactory(
            organization=self.org, role=UserRole.ADMIN, email='admin@example.com', is_org_admin=True,
        )
        self.notifier = RecordingNotifier()
        self.registry = RecordingRegistry()
        self.engine = ApprovalEngine(notifier=self.notifier, entity_status=self.registry)

    def two_step_config(self, **overrides):
        config = {
            'name': 'Invoice approval',
            'entity_type': 'invoice',
            'steps': [
                {'id': 'manager', 'name': 'Manager review', 'order': 1, 'approver_type': 'role', 'role': 'manager'},
                {'id': 'cfo', 'name': 'CFO sign-off', 'order': 2, 'approver_type': 'user', 'approver_id': str(self.cfo.id)},
            ],
        }
        config.update(overrides)
        return config

    def create_workflow(self, **overrides):
        return self.engine.create_workflow(self.org, self.company, self.two_step_config(**overrides))

    def submit(self, entity_id='INV-1', metadata=None, **kwargs):
        return self.engine.create_approval_request(
            self.org, self.company, kwargs.pop('entity_type', 'invoice'), entity_id, self.requester,
            metadata=metadata, **kwargs,
        )

    def pending_assignee(self, approval_request, user):
        return approval_request.assignees.get(user=user, status='pending')

    def act(self, approval_request, user, action='approve', **kwargs):
        assignee = self.pending_assignee(approval_request, user)
        return self.engine.process_approval_action(
            self.org, approval_request.id, assignee.id, action, actor=user, **kwargs,
        )

    def audit_actions(self, approval_request):
        return list(approval_request.audit_trail.order_by('sequence').values_list('action', flat=True))
