from datetime import timedelta
from decimal import Decimal

from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.authentication.tests.helpers import authenticate, create_admin, create_advertiser
from apps.campaigns.models import Campaign
from apps.notifications.models import Notification


def make_campaign(advertiser, name='Spring Launch', **kwargs):
    kwargs.setdefault('budget', Decimal('1000.00'))
    kwargs.setdefault('start_date', timezone.now())
    return Campaign.objects.create(advertiser=advertiser, name=name, **kwargs)


class CampaignModelTests(APITestCase):
    def setUp(self):
        self.advertiser = create_advertiser().advertiser

    def test_valid_transitions(self):
        campaign = make_campaign(self.advertiser)
        self.assertTrue(campaign.can_transition_to('PENDING_APPROVAL'))
        self.assertFalse(campaign.can_transition_to('ACTIVE'))

        campaign.status = 'COMPLETED'
        self.assertFalse(campaign.can_transition_to('ACTIVE'))

    def test_daily_budget_cannot_exceed_budget(self):
        from django.core.exceptions import ValidationError

        with self.assertRaises(ValidationError):
            make_campaign(self.advertiser, daily_budget=Decimal('5000.00'))


class AdvertiserCampaignTests(APITestCase):
    def setUp(self):
        self.user = create_advertiser()
        authenticate(self.client, self.user)

    def test_create_and_list_own_campaigns(self):
        response = self.client.post('/api/v1/advertiser/campaigns/', {
            'name': 'Summer Sale',
            'budget': '2500.00',
            'start_date': timezone.now().isoformat(),
            'end_date': (timezone.now() + timedelta(days=30)).isoformat(),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'DRAFT')

        other = create_advertiser(email='other@lumen.test', company='Other Co')
        make_campaign(other.advertiser, name='Not mine')

        response = self.client.get('/api/v1/advertiser/campaigns/')
        names = [row['name'] for row in response.data]
        self.assertEqual(names, ['Summer Sale'])

    def test_duplicate_name_rejected(self):
        make_campaign(self.user.advertiser, name='Summer Sale')
        response = self.client.post('/api/v1/advertiser/campaigns/', {
            'name': 'Summer Sale',
            'budget': '100.00',
            'start_date': timezone.now().isoformat(),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data['details'])

    def test_end_date_must_follow_start(self):
        now = timezone.now()
        response = self.client.post('/api/v1/advertiser/campaigns/', {
            'name': 'Backwards',
            'budget': '100.00',
            'start_date': now.isoformat(),
            'end_date': (now - timedelta(days=1)).isoformat(),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_advertiser_cannot_approve(self):
        campaign = make_campaign(self.user.advertiser)
        response = self.client.post(f'/api/v1/advertiser/campaigns/{campaign.id}/status/', {'status': 'PENDING_APPROVAL'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post(f'/api/v1/advertiser/campaigns/{campaign.id}/status/', {'status': 'ACTIVE'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AdminCampaignTests(APITestCase):
    def setUp(self):
        self.advertiser_user = create_advertiser()
        self.campaign = make_campaign(self.advertiser_user.advertiser, status='PENDING_APPROVAL')
        authenticate(self.client, create_admin())

    def test_reject_stores_reason_and_notifies_owner(self):
        response = self.client.post(f'/api/v1/admin/campaigns/{self.campaign.id}/status/', {
            'status': 'REJECTED',
            'reason': 'Creative violates policy',
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.campaign.refresh_from_db()
        self.assertEqual(self.campaign.rejection_reason, 'Creative violates policy')

        notification = Notification.objects.get(user=self.advertiser_user)
        self.assertIn('REJECTED with reason: Creative violates policy', notification.message)
        self.assertEqual(notification.related_data['campaignId'], self.campaign.id)

    def test_invalid_transition_is_bad_request(self):
        response = self.client.post(f'/api/v1/admin/campaigns/{self.campaign.id}/status/', {'status': 'COMPLETED'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.campaign.refresh_from_db()
        self.assertEqual(self.campaign.status, 'PENDING_APPROVAL')
