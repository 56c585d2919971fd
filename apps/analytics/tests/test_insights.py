from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.abtests.models import ABTest, ABTestVariant
from apps.analytics.insights import (
    DEFAULT_RECOMMENDATIONS,
    build_ai_insights,
    improvement_percentage,
    summarize_ab_test,
    summarize_emotions,
)
from apps.analytics.models import EmotionData
from apps.authentication.tests.helpers import authenticate, create_admin, create_advertiser
from apps.campaigns.models import Campaign
from apps.sysconfig.models import SystemConfig
from apps.creatives.models import AdCreative


class InsightsFixtureMixin:
    def create_fixtures(self):
        advertiser = create_advertiser().advertiser
        self.campaign = Campaign.objects.create(advertiser=advertiser, name='Insights', budget=Decimal('100'),
                                                start_date=timezone.now())
        self.video = AdCreative.objects.create(campaign=self.campaign, name='Clip', type='VIDEO', headline='Watch')
        self.image = AdCreative.objects.create(campaign=self.campaign, name='Still', type='IMAGE', headline='Look')


class EmotionSummaryTests(InsightsFixtureMixin, TestCase):
    def setUp(self):
        self.create_fixtures()
        now = timezone.now()
        EmotionData.objects.create(ad_creative=self.video, timestamp=now, joy_score=0.8, surprise_score=0.2,
                                   neutral_score=0.1, dwell_time=10)
        EmotionData.objects.create(ad_creative=self.video, timestamp=now, joy_score=0.4, surprise_score=0.4,
                                   neutral_score=0.3, dwell_time=20)
        EmotionData.objects.create(ad_creative=self.image, timestamp=now, joy_score=0.5, surprise_score=0.1,
                                   neutral_score=0.5, dwell_time=4)
        # samples without a joy score are ignored
        EmotionData.objects.create(ad_creative=self.image, timestamp=now, joy_score=None, dwell_time=100)

    def test_averages_per_type_and_creative(self):
        summary = summarize_emotions(EmotionData.objects.select_related('ad_creative').order_by('id'))

        by_type = {row['type']: row for row in summary['byCreativeType']}
        self.assertEqual(by_type['VIDEO']['avgJoy'], 0.6)
        self.assertEqual(by_type['VIDEO']['avgDwellTime'], 15.0)
        self.assertEqual(by_type['VIDEO']['sampleSize'], 2)
        self.assertEqual(by_type['IMAGE']['sampleSize'], 1)

        self.assertEqual(summary['topEmotionalResponses']['mostJoyful'][0]['id'], self.video.id)
        self.assertEqual(summary['topEmotionalResponses']['longestDwellTime'][0]['headline'], 'Watch')
        self.assertAlmostEqual(summary['overall']['avgJoy'], 0.55)

    def test_empty_samples(self):
        summary = summarize_emotions([])
        self.assertEqual(summary['byCreativeType'], [])
        self.assertEqual(summary['overall'], {'avgJoy': 0, 'avgSurprise': 0, 'avgDwellTime': 0})


class ABTestSummaryTests(InsightsFixtureMixin, TestCase):
    def setUp(self):
        self.create_fixtures()
        self.test = ABTest.objects.create(campaign=self.campaign, name='Format', status='ACTIVE')

    def variant(self, creative, name, impressions, engagements):
        return ABTestVariant.objects.create(ab_test=self.test, ad_creative=creative, name=name,
                                            traffic_allocation=Decimal('50'), impressions=impressions,
                                            engagements=engagements)

    def test_clear_winner(self):
        leader = self.variant(self.video, 'Video', 1000, 150)
        self.variant(self.image, 'Image', 1000, 100)

        summary = summarize_ab_test(self.test)
        self.assertTrue(summary['hasSignificantWinner'])
        self.assertEqual(summary['winningVariantId'], leader.id)
        self.assertEqual(summary['improvementPercentage'], 50.0)
        self.assertEqual(summary['overallEngagementRate'], 12.5)
        self.assertEqual(summary['variants'][0]['creativeType'], 'VIDEO')

    def test_margin_too_small(self):
        self.variant(self.video, 'Video', 1000, 110)
        self.variant(self.image, 'Image', 1000, 100)

        summary = summarize_ab_test(self.test)
        self.assertFalse(summary['hasSignificantWinner'])
        self.assertIsNone(summary['winningVariantId'])
        self.assertEqual(summary['improvementPercentage'], 0)

    def test_improvement_against_zero_baseline(self):
        self.assertEqual(improvement_percentage(10, 0), 0)


class AIInsightsTests(InsightsFixtureMixin, APITestCase):
    def test_defaults_when_nothing_configured(self):
        insights = build_ai_insights()
        self.assertEqual(insights['aiRecommendations'], DEFAULT_RECOMMENDATIONS)
        self.assertEqual(insights['modelPerformance']['audienceEstimation']['accuracy'], 92.5)
        self.assertEqual(insights['federatedLearning']['activeDevices'], 0)
        self.assertEqual(insights['federatedLearning']['modelVersion'], '2.4.1')
        self.assertEqual(insights['abTestInsights']['summary']['activeTests'], 0)

    def test_configured_values_override_defaults(self):
        SystemConfig.objects.create(config_key='AI_RECOMMENDATIONS', config_value=[{'id': 9, 'title': 'Custom'}])
        SystemConfig.objects.create(config_key='FEDERATED_LEARNING', config_value={'modelVersion': '3.0.0'})

        insights = build_ai_insights()
        self.assertEqual(insights['aiRecommendations'], [{'id': 9, 'title': 'Custom'}])
        self.assertEqual(insights['federatedLearning'], {'modelVersion': '3.0.0', 'activeDevices': 0})

    def test_endpoint(self):
        authenticate(self.client, create_admin())
        response = self.client.get('/api/v1/admin/ai-insights/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        for key in ('emotionInsights', 'abTestInsights', 'topPerformingCreatives', 'modelPerformance',
                    'federatedLearning', 'aiRecommendations'):
            self.assertIn(key, response.data)
