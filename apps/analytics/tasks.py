import logging
from datetime import date, timedelta
from decimal import Decimal

from celery import shared_task
from django.utils import timezone

from apps.campaigns.models import Campaign
from apps.partners.services import campaign_revenue
from .models import CampaignAnalytics
from .repository import AnalyticsRepository

logger = logging.getLogger(__name__)


def _rate(part, whole):
    return round(part / whole * 100, 2) if whole else 0


@shared_task
def aggregate_daily_campaign_analytics(day_iso=None):
    """Roll up one day of ad deliveries into ``CampaignAnalytics`` rows (yesterday by default)."""
    day = date.fromisoformat(day_iso) if day_iso else timezone.localdate() - timedelta(days=1)
    rows = AnalyticsRepository.daily_delivery_rollup(day)
    pricing = dict(
        Campaign.objects.filter(id__in=[row['campaign_id'] for row in rows]).values_list('id', 'pricing_model')
    )

    for row in rows:
        impressions = row['impressions'] or 0
        engagements = row['engagements'] or 0
        completions = row['completions'] or 0
        cost = campaign_revenue(pricing.get(row['campaign_id']), impressions, engagements, completions)
        CampaignAnalytics.objects.update_or_create(
            campaign_id=row['campaign_id'],
            date=day,
            defaults={
                'impressions': impressions,
                'engagements': engagements,
                'completions': completions,
                'viewer_count': row['viewer_count'] or 0,
                'deliveries': row['delivered'],
                'engagement_rate': _rate(engagements, impressions),
                'completion_rate': _rate(completions, impressions),
                'cost': cost.quantize(Decimal('0.01')),
            },
        )

    logger.info(f"Aggregated daily analytics for {len(rows)} campaigns on {day.isoformat()}")
    return {'date': day.isoformat(), 'campaigns': len(rows)}
