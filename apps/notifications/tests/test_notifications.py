"""
Notification delivery and the recipient's inbox API
"""
from django.core import mail
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.notifications.models import Notification
from apps.notifications.services import NotificationRouter, NotificationService
from tests.factories import UserFactory


class NotificationServiceTests(TestCase):

    def setUp(self):
        self.user = UserFactory()

    def test_notify_delivers_in_app(self):
        notification = NotificationService.notify(
            user=self.user, subject='Approval required', entity_type='approval_request', entity_id='abc',
        )
        notification.refresh_from_db()
        self.assertEqual(notification.organization_id, self.user.organization_id)
        self.assertEqual(notification.status, 'sent')
        self.assertEqual(notification.delivery_attempts, 1)
        self.assertIsNotNone(notification.sent_at)

    def test_inactive_user_is_skipped(self):
        self.user.is_active = False
        self.assertIsNone(NotificationService.notify(user=self.user, subject='Hello'))
        self.assertFalse(Notification.objects.exists())

    def test_external_channel_kept_in_app(self):
        notification = NotificationService.notify(user=self.user, subject='Hello', channel='slack', send_async=False)
        self.assertEqual(notification.status, 'sent')

    def test_email_channel_sends_mail(self):
        notification = NotificationService.notify(
            user=self.user, subject='Invoice INV-1 approved', channel='email', send_async=False,
        )
        self.assertEqual(notification.status, 'sent')
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [self.user.email])

    def test_failing_handler_marks_failed(self):
        router = NotificationRouter()

        def broken(notification):
            raise RuntimeError('gateway down')

        router.register('sms', broken)
        notification = Notification.objects.create(recipient=self.user, subject='Hello', channel='sms')

        self.assertFalse(router.dispatch(notification))
        notification.refresh_from_db()
        self.assertEqual(notification.status, 'failed')
        self.assertEqual(notification.metadata['error'], 'gateway down')


class NotificationApiTests(APITestCase):

    def setUp(self):
        self.user = UserFactory()
        self.other = UserFactory(organization=self.user.organization)
        self.mine = NotificationService.notify(user=self.user, subject='Mine')
        NotificationService.notify(user=self.other, subject='Theirs')
        self.client.force_authenticate(self.user)

    def test_inbox_lists_only_own_notifications(self):
        response = self.client.get(reverse('notification-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['subject'] for item in response.json()['data']], ['Mine'])

    def test_mark_read_and_unread_count(self):
        count_url = reverse('notification-unread-count')
        self.assertEqual(self.client.get(count_url).json()['data']['unread_count'], 1)

        response = self.client.post(reverse('notification-mark-read', args=[self.mine.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(count_url).json()['data']['unread_count'], 0)

    def test_mark_read_of_foreign_notification(self):
        theirs = Notification.objects.get(subject='Theirs')
        response = self.client.post(reverse('notification-mark-read', args=[theirs.id]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unread_filter(self):
        NotificationService.mark_as_read(self.mine.id, self.user)
        NotificationService.notify(user=self.user, subject='Newer')

        response = self.client.get(reverse('notification-list'), {'unread': 'true'})

        self.assertEqual([item['subject'] for item in response.json()['data']], ['Newer'])
