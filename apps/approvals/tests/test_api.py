"""
Approvals REST API: envelopes, tenant isolation and approver permissions
"""
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from apps.approvals.models import ApprovalRequest, ApprovalWorkflow
from apps.notifications.models import Notification
from tests.factories import CompanyFactory, UserFactory

from .helpers import ApprovalSetupMixin


def _client_for(user):
    """Return an APIClient authenticated as `user`."""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


class WorkflowApiTests(ApprovalSetupMixin, APITestCase):

    def setUp(self):
        super().setUp()
        self.url = reverse('approval-workflow-list')

    def payload(self, **overrides):
        data = {'company': str(self.company.id), **self.two_step_config()}
        data.update(overrides)
        return data

    def test_org_admin_creates_workflow(self):
        response = _client_for(self.admin).post(self.url, self.payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['data']['name'], 'Invoice approval')
        self.assertEqual(body['data']['priority'], 'medium')
        workflow = ApprovalWorkflow.objects.get(id=body['data']['id'])
        self.assertEqual(workflow.organization_id, self.org.id)
        self.assertEqual(workflow.created_by, self.admin)

    def test_non_admin_cannot_create_workflow(self):
        response = _client_for(self.manager).post(self.url, self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.json()['success'])

    def test_invalid_steps_use_error_envelope(self):
        steps = [{'id': 'a', 'name': 'A', 'order': 2, 'approver_type': 'role', 'role': 'manager'}]
        response = _client_for(self.admin).post(self.url, self.payload(steps=steps), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        body = response.json()
        self.assertFalse(body['success'])
        self.assertEqual(body['error']['code'], 'invalid_configuration')

    def test_company_of_another_organization_rejected(self):
        foreign = CompanyFactory()
        response = _client_for(self.admin).post(self.url, self.payload(company=str(foreign.id)), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('company', response.json()['error']['details'])

    def test_list_is_scoped_to_organization(self):
        self.create_workflow()
        other_company = CompanyFactory()
        self.engine.create_workflow(other_company.organization, other_company, self.two_step_config())

        response = _client_for(self.manager).get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body['pagination']['count'], 1)
        self.assertEqual(body['data'][0]['company'], str(self.company.id))

    def test_step_change_blocked_once_used(self):
        workflow = self.create_workflow()
        self.submit()
        url = reverse('approval-workflow-detail', args=[workflow.id])
        response = _client_for(self.admin).patch(url, {'steps': self.two_step_config()['steps'][:1]}, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()['error']['code'], 'already_processed')

    def test_delete_soft_deletes(self):
        workflow = self.create_workflow()
        response = _client_for(self.admin).delete(reverse('approval-workflow-detail', args=[workflow.id]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertTrue(ApprovalWorkflow.all_objects.get(pk=workflow.pk).is_deleted)

    def test_applicable_workflows(self):
        large = self.create_workflow(
            name='Large', priority='high',
            conditions=[{'field': 'amount', 'operator': 'greater_than', 'value': 10000}],
        )
        generic = self.create_workflow(name='Generic')
        url = reverse('approval-workflow-applicable')

        response = _client_for(self.manager).get(
            url, {'company': str(self.company.id), 'entity_type': 'invoice', 'amount': '20000'},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['id'] for item in response.json()['data']], [str(large.id), str(generic.id)])


class ApprovalRequestApiTests(ApprovalSetupMixin, APITestCase):

    def setUp(self):
        super().setUp()
        self.create_workflow()
        self.list_url = reverse('approval-request-list')

    def create_via_api(self, **overrides):
        data = {
            'company': str(self.company.id),
            'entity_type': 'invoice',
            'entity_id': 'INV-100',
            'metadata': {'amount': 1200},
        }
        data.update(overrides)
        return _client_for(self.requester).post(self.list_url, data, format='json')

    def action_url(self, approval_request, user):
        assignee = self.pending_assignee(approval_request, user)
        return reverse('approval-request-assignee-action', kwargs={
            'pk': str(approval_request.id), 'assignee_id': str(assignee.id),
        })

    def test_create_request(self):
        response = self.create_via_api()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.json()['data']
        self.assertEqual(data['status'], 'pending')
        self.assertEqual(data['current_step'], 1)
        self.assertEqual(data['current_step_name'], 'Manager review')
        self.assertEqual(data['requested_by'], str(self.requester.id))
        self.assertEqual([item['user'] for item in data['assignees']], [str(self.manager.id)])
        self.assertTrue(Notification.objects.filter(recipient=self.manager, entity_id=data['id']).exists())

    def test_create_without_workflow(self):
        response = self.create_via_api(entity_type='purchase_order')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()['error']['code'], 'no_workflow_found')

    def test_assignee_approves(self):
        approval_request = ApprovalRequest.objects.get(id=self.create_via_api().json()['data']['id'])
        response = _client_for(self.manager).post(
            self.action_url(approval_request, self.manager), {'action': 'approve', 'comments': 'ok'}, format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()['data']
        self.assertEqual(data['current_step'], 2)
        self.assertEqual(data['current_step_name'], 'CFO sign-off')

    def test_only_the_assignee_may_act(self):
        approval_request = ApprovalRequest.objects.get(id=self.create_via_api().json()['data']['id'])
        response = _client_for(self.cfo).post(
            self.action_url(approval_request, self.manager), {'action': 'approve'}, format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_org_admin_may_act_for_assignee(self):
        approval_request = ApprovalRequest.objects.get(id=self.create_via_api().json()['data']['id'])
        response = _client_for(self.admin).post(
            self.action_url(approval_request, self.manager), {'action': 'reject'}, format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['status'], 'rejected')

    def test_second_action_conflicts(self):
        approval_request = ApprovalRequest.objects.get(id=self.create_via_api().json()['data']['id'])
        url = self.action_url(approval_request, self.manager)
        client = _client_for(self.manager)
        client.post(url, {'action': 'reject'}, format='json')

        response = client.post(url, {'action': 'approve'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()['error']['code'], 'already_processed')

    def test_escalation_requires_reason(self):
        approval_request = ApprovalRequest.objects.get(id=self.create_via_api().json()['data']['id'])
        response = _client_for(self.manager).post(
            self.action_url(approval_request, self.manager), {'action': 'escalate'}, format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('escalation_reason', response.json()['error']['details'])

    def test_request_of_another_organization_is_hidden(self):
        request_id = self.create_via_api().json()['data']['id']
        outsider = UserFactory(is_org_admin=True)
        response = _client_for(outsider).get(reverse('approval-request-detail', args=[request_id]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_history_in_sequence_order(self):
        request_id = self.create_via_api().json()['data']['id']
        response = _client_for(self.requester).get(reverse('approval-request-history', args=[request_id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        entries = response.json()['data']
        self.assertEqual([entry['action'] for entry in entries], ['created', 'step_assigned'])
        self.assertEqual([entry['sequence'] for entry in entries], [1, 2])

    def test_my_pending(self):
        self.create_via_api()
        url = reverse('approval-request-my-pending')

        manager_response = _client_for(self.manager).get(url)
        cfo_response = _client_for(self.cfo).get(url)

        self.assertEqual(manager_response.json()['pagination']['count'], 1)
        self.assertEqual(cfo_response.json()['pagination']['count'], 0)

    def test_dashboard(self):
        self.create_via_api()
        rejected = ApprovalRequest.objects.get(id=self.create_via_api(entity_id='INV-101').json()['data']['id'])
        _client_for(self.manager).post(
            self.action_url(rejected, self.manager), {'action': 'reject'}, format='json',
        )

        response = _client_for(self.admin).get(reverse('approval-request-dashboard'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()['data']
        self.assertEqual(data['total'], 2)
        self.assertEqual(data['pending'], 1)
        self.assertEqual(data['rejected'], 1)
        self.assertEqual(data['approval_rate'], 0)
        self.assertEqual(data['by_entity_type'], {'invoice': 2})
        self.assertEqual(len(data['recent']), 2)

    def test_unauthenticated_requests_rejected(self):
        response = APIClient().get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
