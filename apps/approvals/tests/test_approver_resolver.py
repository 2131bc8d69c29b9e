from django.test import TestCase, override_settings

from apps.approvals.definitions import StepDefinition
from apps.approvals.exceptions import InvalidConfiguration, NotFound
from apps.approvals.services import ApproverResolver, DjangoUserDirectory
from apps.authentication.models import UserRole
from tests.factories import OrganizationFactory, UserFactory


class ApproverResolverTests(TestCase):

    def setUp(self):
        self.org = OrganizationFactory()
        self.other_org = OrganizationFactory()
        self.resolver = ApproverResolver(DjangoUserDirectory())
        self.manager_b = UserFactory(organization=self.org, role=UserRole.MANAGER, email='b.manager@example.com')
        self.manager_a = UserFactory(organization=self.org, role=UserRole.MANAGER, email='a.manager@example.com')
        self.cfo = UserFactory(organization=self.org, role=UserRole.CFO, email='cfo@example.com')
        UserFactory(organization=self.other_org, role=UserRole.MANAGER)
        UserFactory(organization=self.org, role=UserRole.MANAGER, is_active=False)

    def resolve(self, metadata=None, **step):
        definition = StepDefinition(id='s1', name='Step', order=1, **step)
        return self.resolver.resolve(step=definition, organization_id=self.org.id, metadata=metadata)

    def test_role_approvers_are_active_org_members_sorted_by_email(self):
        approvers = self.resolve(approver_type='role', role='manager')
        self.assertEqual(
            [approver.user_id for approver in approvers],
            [str(self.manager_a.id), str(self.manager_b.id)],
        )

    def test_specific_user(self):
        approvers = self.resolve(approver_type='user', approver_id=str(self.cfo.id))
        self.assertEqual(len(approvers), 1)
        self.assertEqual(approvers[0].email, 'cfo@example.com')

    def test_specific_user_from_other_org_not_found(self):
        outsider = UserFactory(organization=self.other_org)
        with self.assertRaises(NotFound):
            self.resolve(approver_type='user', approver_id=str(outsider.id))

    def test_specific_user_requires_id(self):
        with self.assertRaises(InvalidConfiguration):
            self.resolve(approver_type='user')

    def test_amount_at_or_below_threshold_has_no_approvers(self):
        self.assertEqual(
            self.resolve(metadata={'amount': '1000'}, approver_type='amount_based', amount_threshold=1000),
            [],
        )

    def test_amount_above_threshold_routes_to_elevated_roles(self):
        approvers = self.resolve(metadata={'amount': 1000.01}, approver_type='amount_based', amount_threshold=1000)
        self.assertEqual([approver.user_id for approver in approvers], [str(self.cfo.id)])

    @override_settings(APPROVAL_ELEVATED_ROLES=['manager'])
    def test_elevated_roles_come_from_settings(self):
        approvers = self.resolve(metadata={'amount': 5000}, approver_type='amount_based', amount_threshold=1000)
        self.assertEqual(len(approvers), 2)

    def test_amount_based_requires_amount(self):
        with self.assertRaises(InvalidConfiguration):
            self.resolve(metadata={}, approver_type='amount_based', amount_threshold=1000)
