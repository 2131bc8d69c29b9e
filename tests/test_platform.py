"""
Platform tests: JWT tenant binding, company scoping, probes and request correlation
"""
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from apps.core.models import Company
from tests.factories import CompanyFactory, OrganizationFactory, UserFactory


class TokenTests(APITestCase):

    def setUp(self):
        self.org = OrganizationFactory()
        self.user = UserFactory(organization=self.org, email='clerk@example.com', password='s3cret-pass')

    def obtain(self, email, password):
        return self.client.post(reverse('token_obtain_pair'), {'email': email, 'password': password}, format='json')

    def test_token_carries_organization_claim_and_authenticates(self):
        response = self.obtain('clerk@example.com', 's3cret-pass')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        access = response.json()['data']['access']

        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {access}')
        profile = client.get(reverse('profile'))

        self.assertEqual(profile.status_code, status.HTTP_200_OK)
        self.assertEqual(profile.json()['data']['organization_id'], str(self.org.id))

    def test_wrong_password(self):
        response = self.obtain('clerk@example.com', 'nope')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.json()['success'])

    def test_user_without_organization_gets_no_token(self):
        UserFactory(organization=None, email='floating@example.com', password='s3cret-pass')
        response = self.obtain('floating@example.com', 's3cret-pass')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class CompanyApiTests(APITestCase):

    def setUp(self):
        self.company = CompanyFactory(name='Main Books')
        self.org = self.company.organization
        CompanyFactory()
        self.admin = UserFactory(organization=self.org, is_org_admin=True)
        self.viewer = UserFactory(organization=self.org)

    def test_list_scoped_to_organization(self):
        self.client.force_authenticate(self.viewer)
        response = self.client.get(reverse('company-list'))
        self.assertEqual(response.json()['pagination']['count'], 1)
        self.assertEqual(response.json()['data'][0]['name'], 'Main Books')

    def test_admin_creates_company_in_own_organization(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(reverse('company-list'), {'name': 'Subsidiary', 'code': 'SUB'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Company.objects.get(code='SUB').organization_id, self.org.id)

    def test_viewer_cannot_create(self):
        self.client.force_authenticate(self.viewer)
        response = self.client.post(reverse('company-list'), {'name': 'Nope', 'code': 'NO'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ProbeTests(TestCase):

    def test_health(self):
        response = self.client.get(reverse('health-check'))
        self.assertEqual(response.json(), {'status': 'ok'})

    def test_correlation_id_is_echoed(self):
        response = self.client.get(reverse('health-check'), HTTP_X_CORRELATION_ID='abc-123')
        self.assertEqual(response['X-Correlation-ID'], 'abc-123')

    def test_readiness(self):
        response = self.client.get(reverse('readiness-check'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'ready')
