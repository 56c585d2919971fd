import logging
from datetime import datetime, timedelta

from celery import shared_task
from django.utils import timezone
from tenacity import retry, stop_after_attempt, wait_exponential

from .models import Partner
from .services import calculate_partner_earnings

logger = logging.getLogger(__name__)


@shared_task
@retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=4, max=10))
def calculate_partner_earnings_task(partner_id, start_iso, end_iso):
    """Earnings statement for one partner and period (ISO datetimes)."""
    start_date = datetime.fromisoformat(start_iso)
    end_date = datetime.fromisoformat(end_iso)
    statement = calculate_partner_earnings(partner_id, start_date, end_date)
    return statement['summary']


@shared_task
def calculate_all_partner_earnings(days=7):
    """Weekly run over every active partner."""
    end_date = timezone.now()
    start_date = end_date - timedelta(days=days)

    partner_ids = list(Partner.objects.filter(status='ACTIVE').values_list('id', flat=True))
    for partner_id in partner_ids:
        calculate_partner_earnings_task.delay(partner_id, start_date.isoformat(), end_date.isoformat())

    logger.info(f"Queued earnings calculation for {len(partner_ids)} partners")
    return {'partners_queued': len(partner_ids)}
