from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.authentication.tests.helpers import authenticate, create_admin, create_advertiser, create_partner
from apps.campaigns.models import AdDelivery, Campaign
from apps.creatives.models import AdCreative
from apps.devices.models import Device
from apps.partners.models import Partner, PartnerEarning
from apps.partners.services import (
    PayoutError,
    calculate_partner_earnings,
    campaign_revenue,
    get_earnings_summary,
    process_partner_payment,
)


class CampaignRevenueTests(TestCase):
    def test_pricing_models(self):
        self.assertEqual(campaign_revenue('CPM', 2000, 0, 0), Decimal('10'))
        self.assertEqual(campaign_revenue('CPE', 0, 10, 0), Decimal('5'))
        self.assertEqual(campaign_revenue('CPA', 0, 0, 3), Decimal('6'))
        self.assertEqual(campaign_revenue('HYBRID', 1000, 4, 0), Decimal('3'))
        self.assertEqual(campaign_revenue('UNKNOWN', 1000, 4, 3), Decimal('0'))


class PartnerEarningsCalculationTests(TestCase):
    def setUp(self):
        self.partner = create_partner().partner
        self.partner.commission_rate = Decimal('0.50')
        self.partner.save()
        advertiser = create_advertiser().advertiser

        self.start = timezone.now() - timedelta(days=7)
        self.end = timezone.now()
        self.campaign = Campaign.objects.create(advertiser=advertiser, name='Metro', budget=Decimal('1000'),
                                                start_date=self.start, pricing_model='CPM')
        creative = AdCreative.objects.create(campaign=self.campaign, name='Poster')
        self.device = Device.objects.create(partner=self.partner, name='Lobby screen', device_identifier='DEV-1')
        Device.objects.create(partner=self.partner, name='Idle screen', device_identifier='DEV-2')

        for impressions in (1000, 3000):
            AdDelivery.objects.create(campaign=self.campaign, ad_creative=creative, device=self.device,
                                      scheduled_time=self.start + timedelta(days=1), status='DELIVERED',
                                      impressions=impressions, engagements=10)
        AdDelivery.objects.create(campaign=self.campaign, ad_creative=creative, device=self.device,
                                  scheduled_time=self.start + timedelta(days=2), status='FAILED',
                                  impressions=9000)

    def test_statement_and_pending_earning(self):
        statement = calculate_partner_earnings(self.partner.id, self.start, self.end)

        # 4000 impressions on CPM at 5 per mille, 50% commission
        self.assertEqual(statement['summary']['totalEarnings'], 10.0)
        self.assertEqual(statement['summary']['totalDevices'], 2)
        self.assertEqual(statement['summary']['activeDevices'], 1)
        self.assertEqual(statement['summary']['totalImpressions'], 4000)

        earning = PartnerEarning.objects.get(partner=self.partner)
        self.assertEqual(earning.status, 'PENDING')
        self.assertEqual(earning.amount, Decimal('10.00'))
        self.assertEqual(earning.total_engagements, 20)

    def test_weekly_task_covers_active_partners(self):
        from apps.partners.tasks import calculate_all_partner_earnings

        create_partner(email='pending@lumen.test', company='Pending Venue')
        Partner.objects.filter(company_name='Pending Venue').update(status='PENDING')

        result = calculate_all_partner_earnings.delay(days=7).get()
        self.assertEqual(result, {'partners_queued': 1})
        self.assertEqual(PartnerEarning.objects.get().amount, Decimal('10.00'))


class EarningsSummaryTests(TestCase):
    def setUp(self):
        self.partner = create_partner().partner

    def earning(self, start, amount, status='PENDING', **kwargs):
        return PartnerEarning.objects.create(partner=self.partner, period_start=start,
                                             period_end=start + timedelta(days=6), amount=Decimal(amount),
                                             status=status, **kwargs)

    def test_month_over_month_change(self):
        now = datetime(2024, 3, 20, tzinfo=dt_timezone.utc)
        self.earning(datetime(2024, 3, 4, tzinfo=dt_timezone.utc), '150', total_impressions=1000,
                     total_engagements=50)
        self.earning(datetime(2024, 2, 5, tzinfo=dt_timezone.utc), '100', status='PAID',
                     paid_date=datetime(2024, 3, 1, tzinfo=dt_timezone.utc))

        summary = get_earnings_summary(self.partner, now=now)
        self.assertEqual(summary['currentMonthEarnings'], 150.0)
        self.assertEqual(summary['previousMonthEarnings'], 100.0)
        self.assertEqual(summary['percentageChange'], 50.0)
        self.assertEqual(summary['pendingPayments'], 150.0)
        self.assertEqual(summary['lastPaymentAmount'], 100.0)
        self.assertEqual(summary['yearToDateEarnings'], 250.0)
        self.assertAlmostEqual(summary['projectedEarnings'], 1000.0)
        self.assertAlmostEqual(summary['averageEngagementRate'], 5.0)

    def test_no_previous_month(self):
        summary = get_earnings_summary(self.partner, now=datetime(2024, 3, 20, tzinfo=dt_timezone.utc))
        self.assertEqual(summary['percentageChange'], 0)
        self.assertEqual(summary['averageEngagementRate'], 0)


class PartnerPayoutTests(APITestCase):
    def setUp(self):
        self.partner = create_partner().partner
        self.earning = PartnerEarning.objects.create(
            partner=self.partner,
            period_start=timezone.now() - timedelta(days=7),
            period_end=timezone.now(),
            amount=Decimal('42.50'),
        )

    def test_process_payment_moves_to_processing(self):
        result = process_partner_payment(self.partner.id, self.earning.id, 'BANK_TRANSFER', {'iban': 'DE00'})
        self.assertTrue(result['paymentReference'].startswith('BANK-'))
        self.assertEqual(result['status'], 'PROCESSING')

        self.earning.refresh_from_db()
        self.assertEqual(self.earning.status, 'PROCESSING')
        self.assertEqual(self.earning.metadata['payment']['iban'], 'DE00')

        with self.assertRaises(PayoutError):
            process_partner_payment(self.partner.id, self.earning.id, 'BANK_TRANSFER')

    def test_rejects_foreign_earning_and_unknown_method(self):
        other = create_partner(email='other@lumen.test', company='Other Venue').partner
        with self.assertRaises(PayoutError):
            process_partner_payment(other.id, self.earning.id, 'PAYPAL')
        with self.assertRaises(PayoutError):
            process_partner_payment(self.partner.id, self.earning.id, 'MPESA')

    def test_admin_payout_endpoint(self):
        authenticate(self.client, create_admin())
        response = self.client.post(f'/api/v1/admin/partners/{self.partner.id}/payout/', {
            'earning_id': self.earning.id,
            'method': 'PAYPAL',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['paymentReference'].startswith('PAYPAL-'))

    def test_partner_summary_endpoint(self):
        authenticate(self.client, self.partner.user)
        response = self.client.get('/api/v1/partner/earnings/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pendingPayments'], 42.5)
