from typing import Any, Dict, List

from django.db.models import Count, Q, Sum

from apps.abtests.models import ABTest
from apps.advertisers.models import Advertiser
from apps.billing.models import Payment, Transaction
from apps.campaigns.models import AdDelivery, Campaign
from apps.creatives.models import AdCreative
from apps.devices.models import Device
from apps.partners.models import Partner
from .models import EmotionData
from .repositories.performance import monitor_query_performance


class AnalyticsRepository:
    @staticmethod
    @monitor_query_performance
    def transactions_between(start, end) -> List[Transaction]:
        return list(
            Transaction.objects
            .filter(date__gte=start, date__lte=end)
            .select_related('payment_method')
            .order_by('-date')
        )

    @staticmethod
    @monitor_query_performance
    def payments_between(start, end) -> List[Payment]:
        return list(
            Payment.objects
            .filter(date_initiated__gte=start, date_initiated__lte=end)
            .select_related('advertiser', 'partner')
            .order_by('-date_initiated')
        )

    @staticmethod
    def partner_names() -> Dict[str, str]:
        return {str(pk): name for pk, name in Partner.objects.values_list('id', 'company_name')}

    @staticmethod
    def advertiser_names() -> Dict[str, str]:
        return {str(pk): name for pk, name in Advertiser.objects.values_list('id', 'company_name')}

    @staticmethod
    @monitor_query_performance
    def recent_emotion_data(since, limit=500) -> List[EmotionData]:
        return list(
            EmotionData.objects
            .filter(timestamp__gte=since)
            .select_related('ad_creative')[:limit]
        )

    @staticmethod
    @monitor_query_performance
    def ab_tests_for_insights(limit=10) -> List[ABTest]:
        return list(
            ABTest.objects
            .filter(status__in=['ACTIVE', 'COMPLETED'])
            .prefetch_related('variants__ad_creative')
            .order_by('-created_at')[:limit]
        )

    @staticmethod
    @monitor_query_performance
    def creatives_delivered_since(since, limit=10) -> List[Dict[str, Any]]:
        """Approved creatives with at least one delivery scheduled since ``since``, with lifetime totals."""
        creatives = (
            AdCreative.objects
            .filter(is_approved=True, deliveries__scheduled_time__gte=since)
            .distinct()
            .order_by('id')[:limit]
        )
        totals = {
            row['ad_creative']: row
            for row in AdDelivery.objects
            .filter(ad_creative__in=[creative.id for creative in creatives])
            .values('ad_creative')
            .annotate(impressions=Sum('impressions'), engagements=Sum('engagements'),
                      completions=Sum('completions'))
        }
        rows = []
        for creative in creatives:
            total = totals.get(creative.id, {})
            rows.append({
                'creative': creative,
                'impressions': total.get('impressions') or 0,
                'engagements': total.get('engagements') or 0,
                'completions': total.get('completions') or 0,
            })
        return rows

    @staticmethod
    def active_device_count(since) -> int:
        return Device.objects.filter(status='ACTIVE', last_active__gte=since).count()

    @staticmethod
    @monitor_query_performance
    def daily_delivery_rollup(day) -> List[Dict[str, Any]]:
        """Per-campaign totals of the deliveries scheduled on ``day``."""
        return list(
            AdDelivery.objects
            .filter(scheduled_time__date=day)
            .values('campaign_id')
            .annotate(
                deliveries=Count('id'),
                delivered=Count('id', filter=Q(status='DELIVERED')),
                impressions=Sum('impressions'),
                engagements=Sum('engagements'),
                completions=Sum('completions'),
                viewer_count=Sum('viewer_count'),
            )
            .order_by('campaign_id')
        )

    @staticmethod
    @monitor_query_performance
    def dashboard_counts() -> Dict[str, Any]:
        from apps.authentication.models import User

        campaigns = Campaign.objects.aggregate(
            total=Count('id'),
            active=Count('id', filter=Q(status='ACTIVE')),
            pending=Count('id', filter=Q(status='PENDING_APPROVAL')),
        )
        devices = Device.objects.aggregate(
            total=Count('id'),
            active=Count('id', filter=Q(status='ACTIVE')),
        )
        revenue = Transaction.objects.filter(
            status='COMPLETED', type__in=['DEPOSIT', 'PAYMENT']
        ).aggregate(total=Sum('amount'))['total']
        return {
            'users': User.objects.count(),
            'advertisers': Advertiser.objects.count(),
            'partners': Partner.objects.count(),
            'campaigns': campaigns,
            'devices': devices,
            'pendingCreatives': AdCreative.objects.filter(status='PENDING_REVIEW').count(),
            'pendingWithdrawals': Transaction.objects.filter(type='WITHDRAWAL', status='PENDING').count(),
            'totalRevenue': float(revenue or 0),
        }
