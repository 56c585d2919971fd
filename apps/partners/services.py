import logging
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.utils import timezone

from apps.analytics.repositories import monitor_query_performance
from .models import Partner, PartnerEarning

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


class PayoutError(Exception):
    pass


def campaign_revenue(pricing_model, impressions, engagements, completions):
    """Gross revenue a campaign's deliveries generate under its pricing model."""
    impressions = Decimal(impressions)
    engagements = Decimal(engagements)
    completions = Decimal(completions)

    if pricing_model == 'CPM':
        return impressions / 1000 * 5
    if pricing_model == 'CPE':
        return engagements * Decimal('0.5')
    if pricing_model == 'CPA':
        return completions * 2
    if pricing_model == 'HYBRID':
        return impressions / 1000 * 2 + engagements * Decimal('0.25')
    return Decimal('0')


@monitor_query_performance
def calculate_partner_earnings(partner_id, start_date, end_date):
    """Compute a partner's commission for a period and store it as a PENDING earning."""
    from apps.campaigns.models import AdDelivery

    partner = Partner.objects.get(pk=partner_id)
    devices = list(partner.devices.all())

    deliveries = (
        AdDelivery.objects
        .filter(device__partner=partner, status='DELIVERED',
                scheduled_time__gte=start_date, scheduled_time__lte=end_date)
        .select_related('campaign')
    )

    per_device = defaultdict(lambda: defaultdict(list))
    for delivery in deliveries:
        per_device[delivery.device_id][delivery.campaign_id].append(delivery)

    total_earnings = Decimal('0')
    total_impressions = 0
    total_engagements = 0
    device_rows = []

    for device in devices:
        campaigns = per_device.get(device.id, {})
        device_impressions = 0
        device_earnings = Decimal('0')
        campaign_rows = []

        for campaign_id, rows in campaigns.items():
            campaign = rows[0].campaign
            impressions = sum(d.impressions for d in rows)
            engagements = sum(d.engagements for d in rows)
            completions = sum(d.completions for d in rows)

            revenue = campaign_revenue(campaign.pricing_model, impressions, engagements, completions)
            earnings = revenue * partner.commission_rate

            device_impressions += impressions
            device_earnings += earnings
            total_engagements += engagements
            campaign_rows.append({
                'campaignId': campaign_id,
                'campaignName': campaign.name,
                'impressions': impressions,
                'engagements': engagements,
                'completions': completions,
                'revenue': float(revenue),
                'earnings': float(earnings),
            })

        total_impressions += device_impressions
        total_earnings += device_earnings
        device_rows.append({
            'deviceId': device.id,
            'deviceName': device.name,
            'impressions': device_impressions,
            'earnings': float(device_earnings),
            'campaigns': campaign_rows,
        })

    amount = total_earnings.quantize(CENT, rounding=ROUND_HALF_UP)
    statement = {
        'partnerId': partner.id,
        'partnerName': partner.company_name,
        'period': {'startDate': start_date.isoformat(), 'endDate': end_date.isoformat()},
        'commissionRate': float(partner.commission_rate),
        'summary': {
            'totalDevices': len(devices),
            'activeDevices': len(per_device),
            'totalImpressions': total_impressions,
            'totalEarnings': float(amount),
        },
        'devices': device_rows,
        'generatedAt': timezone.now().isoformat(),
    }

    PartnerEarning.objects.create(
        partner=partner,
        period_start=start_date,
        period_end=end_date,
        total_impressions=total_impressions,
        total_engagements=total_engagements,
        amount=amount,
        status='PENDING',
        metadata=statement,
    )
    logger.info(f"Partner {partner.id} earned {amount} for {start_date.date()} - {end_date.date()}")
    return statement


def _month_start(moment):
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _previous_month_start(moment):
    start = _month_start(moment)
    if start.month == 1:
        return start.replace(year=start.year - 1, month=12)
    return start.replace(month=start.month - 1)


def _next_month_start(moment):
    start = _month_start(moment)
    if start.month == 12:
        return start.replace(year=start.year + 1, month=1)
    return start.replace(month=start.month + 1)


def get_earnings_summary(partner, now=None):
    now = now or timezone.now()
    current_start = _month_start(now)
    current_end = _next_month_start(now)
    previous_start = _previous_month_start(now)
    year_start = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)

    earnings = list(partner.earnings.all())

    def total(rows):
        return sum((float(e.amount) for e in rows), 0.0)

    current_month = total(e for e in earnings
                          if e.period_start >= current_start and e.period_end < current_end)
    previous_month = total(e for e in earnings
                           if e.period_start >= previous_start and e.period_end < current_start)
    year_to_date = total(e for e in earnings if e.period_start >= year_start)
    pending = total(e for e in earnings if e.status == 'PENDING')

    percentage_change = ((current_month - previous_month) / previous_month * 100) if previous_month > 0 else 0
    last_paid = next((e for e in earnings if e.status == 'PAID'), None)

    total_impressions = sum(e.total_impressions for e in earnings)
    total_engagements = sum(e.total_engagements for e in earnings)

    return {
        'totalEarnings': year_to_date,
        'pendingPayments': pending,
        'lastPaymentAmount': float(last_paid.amount) if last_paid else 0,
        'lastPaymentDate': last_paid.paid_date if last_paid else None,
        'currentMonthEarnings': current_month,
        'previousMonthEarnings': previous_month,
        'percentageChange': percentage_change,
        'yearToDateEarnings': year_to_date,
        'projectedEarnings': year_to_date / now.month * 12,
        'totalImpressions': total_impressions,
        'totalEngagements': total_engagements,
        'averageEngagementRate': (total_engagements / total_impressions * 100) if total_impressions > 0 else 0,
    }


def _base36(number):
    digits = '0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ'
    result = ''
    while number:
        number, remainder = divmod(number, 36)
        result = digits[remainder] + result
    return result or '0'


def process_partner_payment(partner_id, earning_id, method, details=None):
    """Move a PENDING earning to PROCESSING and record the payout reference."""
    prefixes = {'BANK_TRANSFER': 'BANK', 'PAYPAL': 'PAYPAL'}
    if method not in prefixes:
        raise PayoutError(f"Unsupported payment method: {method}")

    with transaction.atomic():
        try:
            earning = PartnerEarning.objects.select_for_update().select_related('partner').get(pk=earning_id)
        except PartnerEarning.DoesNotExist:
            raise PayoutError(f"Partner earning with ID {earning_id} not found")

        if earning.partner_id != int(partner_id):
            raise PayoutError(f"Partner earning does not belong to partner {partner_id}")
        if earning.status != 'PENDING':
            raise PayoutError('Partner earning is not in PENDING status')

        now = timezone.now()
        reference = f"{prefixes[method]}-{_base36(int(now.timestamp() * 1000))}"
        earning.status = 'PROCESSING'
        earning.transaction_id = reference
        earning.metadata = {
            **(earning.metadata or {}),
            'payment': {'method': method, **(details or {}), 'processedAt': now.isoformat()},
        }
        earning.save(update_fields=['status', 'transaction_id', 'metadata'])

    logger.info(f"Payout {reference} queued for partner {partner_id}, earning {earning_id}")
    return {
        'success': True,
        'earningId': earning.id,
        'paymentReference': reference,
        'status': earning.status,
        'amount': float(earning.amount),
        'currency': earning.currency,
        'partnerId': earning.partner_id,
        'partnerName': earning.partner.company_name,
        'processedAt': now.isoformat(),
    }

