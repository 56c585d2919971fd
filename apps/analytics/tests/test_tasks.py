from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from django.test import TestCase, override_settings

from apps.analytics.models import CampaignAnalytics
from apps.analytics.tasks import aggregate_daily_campaign_analytics
from apps.authentication.tests.helpers import create_advertiser, create_partner
from apps.campaigns.models import AdDelivery, Campaign
from apps.creatives.models import AdCreative
from apps.devices.models import Device


@override_settings(TIME_ZONE='UTC')
class DailyCampaignRollupTests(TestCase):
    def setUp(self):
        advertiser = create_advertiser().advertiser
        device = Device.objects.create(partner=create_partner().partner, name='Screen', device_identifier='S-1')
        self.campaign = Campaign.objects.create(advertiser=advertiser, name='Rollup', budget=Decimal('100'),
                                                start_date=datetime(2024, 5, 1, tzinfo=dt_timezone.utc),
                                                pricing_model='CPE')
        creative = AdCreative.objects.create(campaign=self.campaign, name='Clip')

        def deliver(hour, status='DELIVERED', day=10, **counts):
            AdDelivery.objects.create(campaign=self.campaign, ad_creative=creative, device=device, status=status,
                                      scheduled_time=datetime(2024, 5, day, hour, tzinfo=dt_timezone.utc), **counts)

        deliver(9, impressions=200, engagements=20, completions=10, viewer_count=15)
        deliver(18, impressions=300, engagements=30, completions=5, viewer_count=25)
        deliver(12, status='FAILED')
        deliver(9, day=11, impressions=999, engagements=99)

    def test_rolls_up_one_day(self):
        result = aggregate_daily_campaign_analytics('2024-05-10')
        self.assertEqual(result, {'date': '2024-05-10', 'campaigns': 1})

        row = CampaignAnalytics.objects.get(campaign=self.campaign)
        self.assertEqual(row.impressions, 500)
        self.assertEqual(row.engagements, 50)
        self.assertEqual(row.completions, 15)
        self.assertEqual(row.viewer_count, 40)
        self.assertEqual(row.deliveries, 2)
        self.assertEqual(row.engagement_rate, 10.0)
        self.assertEqual(row.completion_rate, 3.0)
        # 50 engagements at 0.50 each
        self.assertEqual(row.cost, Decimal('25.00'))

    def test_rerun_updates_existing_row(self):
        aggregate_daily_campaign_analytics('2024-05-10')
        aggregate_daily_campaign_analytics('2024-05-10')
        self.assertEqual(CampaignAnalytics.objects.filter(campaign=self.campaign).count(), 1)
