from unittest.mock import AsyncMock, patch

import requests
from django.core import mail
from django.core.cache import cache
from django.test import override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from apps.authentication.tests.helpers import authenticate, create_partner
from apps.notifications.models import Notification, NotificationPreference
from apps.notifications.services import notify
from apps.notifications.tasks import post_sms, send_sms


class NotifyTests(APITestCase):
    def setUp(self):
        self.user = create_partner()

    def test_stores_and_emails_when_category_allowed(self):
        with self.captureOnCommitCallbacks(execute=True):
            notification = notify(self.user, 'Payout sent', 'Your payout is on its way', type='PAYMENT',
                                  category='payment', related_data={'amount': 50})

        self.assertEqual(notification.related_data, {'amount': 50})
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, 'Payout sent')
        self.assertEqual(mail.outbox[0].to, [self.user.email])

    def test_opted_out_category_is_stored_but_not_emailed(self):
        with self.captureOnCommitCallbacks(execute=True):
            notify(self.user, 'New campaign', 'A campaign started', category='campaign')

        self.assertEqual(Notification.objects.filter(user=self.user).count(), 1)
        self.assertEqual(len(mail.outbox), 0)

    def test_pushes_to_user_group(self):
        with patch('apps.notifications.services.get_channel_layer') as get_layer:
            get_layer.return_value.group_send = AsyncMock()
            with self.captureOnCommitCallbacks(execute=True):
                notify(self.user, 'Hello', 'World')
        group_send = get_layer.return_value.group_send
        group, event = group_send.call_args[0]
        self.assertEqual(group, f'notifications_{self.user.id}')
        self.assertEqual(event['type'], 'notification.message')
        self.assertEqual(event['notification']['title'], 'Hello')

    def test_push_waits_for_commit(self):
        with patch('apps.notifications.services.get_channel_layer') as get_layer:
            get_layer.return_value.group_send = AsyncMock()
            with self.captureOnCommitCallbacks(execute=False) as callbacks:
                notify(self.user, 'Hello', 'World')
            get_layer.return_value.group_send.assert_not_called()

            callbacks[0]()
        get_layer.return_value.group_send.assert_called_once()

    def test_security_alerts_cannot_be_disabled(self):
        preference = NotificationPreference.objects.create(user=self.user, security_alerts=False)
        preference.refresh_from_db()
        self.assertTrue(preference.security_alerts)
        self.assertTrue(preference.allows('security'))
        self.assertTrue(preference.allows('unmapped-category'))


class SmsTests(APITestCase):
    @override_settings(SMS_API_URL='')
    def test_skipped_without_provider(self):
        self.assertEqual(send_sms('+254700000001', 'hi'), {'sent': False})

    @override_settings(SMS_API_URL='https://sms.example.com/send', SMS_API_KEY='key')
    @patch('apps.notifications.tasks.requests.post')
    def test_posts_to_provider(self, post):
        cache.clear()
        post.return_value.status_code = 200
        post.return_value.content = b'{"id": "msg-1"}'
        post.return_value.json.return_value = {'id': 'msg-1'}

        result = send_sms('+254700000001', 'hi')
        self.assertEqual(result, {'sent': True, 'provider': {'id': 'msg-1'}})
        self.assertEqual(post.call_args.kwargs['json']['to'], '+254700000001')
        self.assertEqual(post.call_args.kwargs['headers'], {'Authorization': 'Bearer key'})

    @override_settings(SMS_API_URL='https://sms.example.com/send', SMS_API_KEY='key')
    @patch('apps.notifications.tasks.requests.post')
    def test_client_errors_do_not_trip_the_circuit(self, post):
        cache.clear()
        post.return_value.status_code = 400
        post.return_value.raise_for_status.side_effect = requests.HTTPError('400 Client Error')

        for _ in range(6):
            with self.assertRaises(requests.HTTPError):
                send_sms('+254700000001', 'hi')
        self.assertEqual(post.call_count, 6)
        self.assertIsNone(cache.get(post_sms.circuit_key()))


class NotificationApiTests(APITestCase):
    def setUp(self):
        cache.clear()
        self.user = create_partner()
        other = create_partner(email='other@lumen.test', company='Other')
        self.first = Notification.objects.create(user=self.user, title='One', message='first')
        Notification.objects.create(user=self.user, title='Two', message='second', category='payment')
        Notification.objects.create(user=other, title='Not mine', message='hidden')
        authenticate(self.client, self.user)

    def test_list_with_unread_count(self):
        response = self.client.get('/api/v1/notifications/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['unreadCount'], 2)
        self.assertEqual([row['title'] for row in response.data['notifications']], ['Two', 'One'])

        response = self.client.get('/api/v1/notifications/', {'category': 'payment'})
        self.assertEqual(len(response.data['notifications']), 1)

    def test_mark_read_and_read_all(self):
        response = self.client.post(f'/api/v1/notifications/{self.first.id}/read/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_read'])

        response = self.client.post('/api/v1/notifications/read-all/')
        self.assertEqual(response.data['updated'], 1)
        self.assertEqual(self.client.get('/api/v1/notifications/').data['unreadCount'], 0)

    def test_requires_authentication(self):
        self.client.credentials()
        response = self.client.get('/api/v1/notifications/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_preferences_round_trip(self):
        response = self.client.get('/api/v1/account-settings/notifications/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['email'])
        self.assertFalse(response.data['campaign_updates'])

        response = self.client.put('/api/v1/account-settings/notifications/', {
            'campaign_updates': True,
            'security_alerts': False,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])

        response = self.client.get('/api/v1/account-settings/notifications/')
        self.assertTrue(response.data['campaign_updates'])
        self.assertTrue(response.data['security_alerts'])


class ContactTests(APITestCase):
    def test_contact_form_emails_support(self):
        response = self.client.post('/api/v1/contact/', {
            'name': 'Visitor',
            'email': 'visitor@example.com',
            'subject': 'Pricing',
            'message': 'How much does a screen network cost?',
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(mail.outbox[0].to, ['support@lumen-ads.com'])
        self.assertEqual(mail.outbox[0].subject, '[Contact] Pricing')

    def test_invalid_contact_form(self):
        response = self.client.post('/api/v1/contact/', {'name': 'x', 'email': 'bad', 'subject': 's',
                                                          'message': 'short'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid contact form data')
