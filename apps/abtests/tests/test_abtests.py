from decimal import Decimal

from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.abtests.models import ABTest, ABTestVariant
from apps.authentication.tests.helpers import authenticate, create_advertiser
from apps.campaigns.models import Campaign
from apps.creatives.models import AdCreative


class ABTestTests(APITestCase):
    def setUp(self):
        self.user = create_advertiser()
        authenticate(self.client, self.user)
        self.campaign = Campaign.objects.create(
            advertiser=self.user.advertiser,
            name='Launch',
            budget=Decimal('500.00'),
            start_date=timezone.now(),
        )
        self.creative_a = AdCreative.objects.create(campaign=self.campaign, name='Blue banner')
        self.creative_b = AdCreative.objects.create(campaign=self.campaign, name='Red banner')

    def payload(self, allocations=(50, 50)):
        return {
            'campaign': self.campaign.id,
            'name': 'Banner colour',
            'variants': [
                {'ad_creative': self.creative_a.id, 'name': 'A', 'traffic_allocation': str(allocations[0])},
                {'ad_creative': self.creative_b.id, 'name': 'B', 'traffic_allocation': str(allocations[1])},
            ],
        }

    def test_create_with_variants(self):
        response = self.client.post('/api/v1/advertiser/abtests/', self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(ABTestVariant.objects.filter(ab_test_id=response.data['id']).count(), 2)

    def test_allocations_must_sum_to_100(self):
        response = self.client.post('/api/v1/advertiser/abtests/', self.payload((60, 30)), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('variants', response.data['details'])

    def test_completing_picks_best_engagement_rate(self):
        ab_test = ABTest.objects.create(campaign=self.campaign, name='Banner colour', status='ACTIVE')
        ABTestVariant.objects.create(ab_test=ab_test, ad_creative=self.creative_a, name='A',
                                     traffic_allocation=Decimal('50'), impressions=1000, engagements=50)
        winner = ABTestVariant.objects.create(ab_test=ab_test, ad_creative=self.creative_b, name='B',
                                              traffic_allocation=Decimal('50'), impressions=1000, engagements=90)

        response = self.client.post(f'/api/v1/advertiser/abtests/{ab_test.id}/status/', {'status': 'COMPLETED'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ab_test.refresh_from_db()
        self.assertEqual(ab_test.winning_variant_id, winner.id)
        self.assertIsNotNone(ab_test.end_date)

    def test_variant_rates_handle_zero_impressions(self):
        ab_test = ABTest.objects.create(campaign=self.campaign, name='Empty')
        variant = ABTestVariant.objects.create(ab_test=ab_test, ad_creative=self.creative_a, name='A',
                                               traffic_allocation=Decimal('100'))
        self.assertEqual(variant.engagement_rate, 0)
        self.assertEqual(variant.conversion_rate, 0)
