from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.authentication.tests.helpers import authenticate, create_admin, create_advertiser
from apps.campaigns.models import Campaign
from apps.creatives.models import AdCreative
from apps.notifications.models import Notification


def make_campaign(advertiser, name='Launch'):
    return Campaign.objects.create(advertiser=advertiser, name=name, budget=Decimal('500.00'),
                                   start_date=timezone.now())


class AdvertiserCreativeTests(APITestCase):
    def setUp(self):
        self.user = create_advertiser()
        self.campaign = make_campaign(self.user.advertiser)
        authenticate(self.client, self.user)

    def test_create_creative_for_own_campaign(self):
        response = self.client.post('/api/v1/advertiser/creatives/', {
            'campaign': self.campaign.id,
            'name': 'Hero banner',
            'type': 'IMAGE',
            'headline': 'Fresh coffee',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'DRAFT')
        self.assertFalse(response.data['is_approved'])

    def test_cannot_attach_creative_to_foreign_campaign(self):
        other = create_advertiser(email='other@lumen.test', company='Other Co')
        foreign = make_campaign(other.advertiser, name='Theirs')

        response = self.client.post('/api/v1/advertiser/creatives/', {
            'campaign': foreign.id,
            'name': 'Sneaky',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('campaign', response.data['details'])

    def test_edit_sends_creative_back_to_draft(self):
        creative = AdCreative.objects.create(campaign=self.campaign, name='Banner', status='APPROVED',
                                             is_approved=True)
        response = self.client.patch(f'/api/v1/advertiser/creatives/{creative.id}/',
                                     {'headline': 'New copy'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        creative.refresh_from_db()
        self.assertEqual(creative.status, 'DRAFT')
        self.assertFalse(creative.is_approved)

    def test_upload_stores_asset_and_sets_preview(self):
        creative = AdCreative.objects.create(campaign=self.campaign, name='Banner', type='IMAGE')
        upload = SimpleUploadedFile('banner.png', b'\x89PNG fake image', content_type='image/png')

        response = self.client.post(f'/api/v1/advertiser/creatives/{creative.id}/upload/',
                                    {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        creative.refresh_from_db()
        self.assertEqual(creative.content, response.data['url'])
        self.assertEqual(creative.preview_image, response.data['url'])
        self.assertIn(f'advertiser_{self.user.advertiser.id}/creative_{creative.id}/', creative.content)

    def test_upload_rejects_unsupported_type(self):
        creative = AdCreative.objects.create(campaign=self.campaign, name='Banner')
        upload = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')

        response = self.client.post(f'/api/v1/advertiser/creatives/{creative.id}/upload/',
                                    {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Unsupported file type', response.data['error'])

    def test_upload_requires_file(self):
        creative = AdCreative.objects.create(campaign=self.campaign, name='Banner')
        response = self.client.post(f'/api/v1/advertiser/creatives/{creative.id}/upload/', {}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_submit_for_review(self):
        creative = AdCreative.objects.create(campaign=self.campaign, name='Banner')
        response = self.client.post(f'/api/v1/advertiser/creatives/{creative.id}/submit/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'PENDING_REVIEW')


class CreativeReviewTests(APITestCase):
    def setUp(self):
        self.advertiser_user = create_advertiser()
        campaign = make_campaign(self.advertiser_user.advertiser)
        self.creative = AdCreative.objects.create(campaign=campaign, name='Banner', status='PENDING_REVIEW')
        authenticate(self.client, create_admin())

    def test_reject_requires_reason(self):
        response = self.client.post(f'/api/v1/admin/creatives/{self.creative.id}/review/', {'decision': 'REJECTED'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reject_notifies_advertiser(self):
        response = self.client.post(f'/api/v1/admin/creatives/{self.creative.id}/review/', {
            'decision': 'REJECTED',
            'reason': 'Logo is blurry',
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.creative.refresh_from_db()
        self.assertEqual(self.creative.status, 'REJECTED')
        self.assertEqual(self.creative.rejection_reason, 'Logo is blurry')

        notification = Notification.objects.get(user=self.advertiser_user)
        self.assertEqual(notification.title, 'Creative rejected')
        self.assertIn('Logo is blurry', notification.message)

    def test_approve_clears_reason(self):
        self.creative.rejection_reason = 'old'
        self.creative.save()
        response = self.client.post(f'/api/v1/admin/creatives/{self.creative.id}/review/', {'decision': 'APPROVED'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.creative.refresh_from_db()
        self.assertTrue(self.creative.is_approved)
        self.assertIsNone(self.creative.rejection_reason)

    def test_filter_by_status(self):
        AdCreative.objects.create(campaign=self.creative.campaign, name='Other', status='APPROVED')
        response = self.client.get('/api/v1/admin/creatives/?status=pending_review')
        self.assertEqual([row['id'] for row in response.data], [self.creative.id])
