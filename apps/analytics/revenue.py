"""Revenue aggregation for the admin revenue dashboard.

All aggregation happens over plain lists of transactions so the same helpers
serve both the current window and the comparison window that precedes it.
"""
import calendar
import math
from collections import defaultdict
from datetime import datetime, time, timedelta

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .repositories import monitor_query_performance
from .repository import AnalyticsRepository

REVENUE_TYPES = ('DEPOSIT', 'PAYMENT')

SOURCE_TAGS = [
    ('adv', 'Advertiser Payments'),
    ('partner', 'Partner Commissions'),
    ('fee', 'Platform Fees'),
    ('campaign', 'Campaign Deposits'),
]
OTHER_SOURCE = 'Other'

REGIONS = ['North America', 'Europe', 'Asia', 'Africa', 'South America', 'Oceania']
DEFAULT_REGION = 'North America'

PERIOD_FORMAT = '%b %Y'


class InvalidPeriod(ValueError):
    pass


def js_round(value):
    """Round half up, the way dashboard clients round percentages."""
    return int(math.floor(value + 0.5))


def growth(current, previous):
    if previous > 0:
        return js_round((current - previous) / previous * 100)
    return 0


def _parse_bound(value, end_of_day=False):
    day = parse_date(value)
    if day is not None:
        moment = datetime.combine(day, time.max if end_of_day else time.min)
    else:
        moment = parse_datetime(value)
        if moment is None:
            raise InvalidPeriod(f"Invalid date: {value}")
    if timezone.is_naive(moment):
        moment = timezone.make_aware(moment)
    return moment


def resolve_period(params, now=None):
    """Return ``(start, end)`` for the ``range``/``startDate``/``endDate`` query parameters."""
    now = now or timezone.now()
    start_param = params.get('startDate')
    end_param = params.get('endDate')

    if start_param and end_param:
        try:
            start = _parse_bound(start_param)
            end = _parse_bound(end_param, end_of_day=True)
        except ValueError as e:
            raise InvalidPeriod(str(e))
        if start > end:
            raise InvalidPeriod('startDate must be before endDate')
        return start, end

    period = params.get('range') or '30d'
    if period == '7d':
        return now - timedelta(days=7), now
    if period == '90d':
        return now - timedelta(days=90), now
    if period == 'ytd':
        local = timezone.localtime(now)
        return local.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0), now
    if period == 'month':
        local = timezone.localtime(now)
        last_day = calendar.monthrange(local.year, local.month)[1]
        start = local.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        end = local.replace(day=last_day, hour=23, minute=59, second=59, microsecond=999999)
        return start, end
    return now - timedelta(days=30), now


def previous_period(start, end):
    length = end - start
    return start - length, end - length


def is_revenue(transaction):
    return transaction.status == 'COMPLETED' and transaction.type in REVENUE_TYPES


def _amount(transaction):
    return float(transaction.amount)


def _tag_value(reference, tag):
    """Text between ``tag`` and the next ``:`` in a reference, or None."""
    if not reference or tag not in reference:
        return None
    return reference.split(tag, 1)[1].split(':')[0]


def revenue_source(reference):
    for tag, label in SOURCE_TAGS:
        if reference and tag in reference:
            return label
    return OTHER_SOURCE


def revenue_region(transaction):
    metadata = transaction.metadata if isinstance(transaction.metadata, dict) else {}
    location = metadata.get('location')
    if isinstance(location, dict) and location.get('continent'):
        return location['continent']
    region = _tag_value(transaction.reference, 'region:')
    return region if region is not None else DEFAULT_REGION


def build_overview(transactions, previous):
    total_revenue = sum(_amount(t) for t in transactions if is_revenue(t))
    previous_revenue = sum(_amount(t) for t in previous if is_revenue(t))
    pending_revenue = sum(
        _amount(t) for t in transactions if t.status == 'PENDING' and t.type in REVENUE_TYPES
    )
    total_transactions = sum(1 for t in transactions if t.status == 'COMPLETED')
    previous_transactions = sum(1 for t in previous if t.status == 'COMPLETED')

    method_amounts = defaultdict(float)
    for t in transactions:
        if t.payment_method_id:
            method_amounts[t.payment_method.type] += _amount(t)

    top_method, top_amount = 'OTHER', 0
    for method, amount in method_amounts.items():
        if amount > top_amount:
            top_method, top_amount = method, amount

    return {
        'totalRevenue': total_revenue,
        'pendingRevenue': pending_revenue,
        'totalTransactions': total_transactions,
        'averageTransactionValue': total_revenue / total_transactions if total_transactions else 0,
        'revenueGrowth': growth(total_revenue, previous_revenue),
        'transactionGrowth': growth(total_transactions, previous_transactions),
        'pendingPayouts': sum(1 for t in transactions if t.status == 'PENDING' and t.type == 'WITHDRAWAL'),
        'failedTransactions': sum(1 for t in transactions if t.status == 'FAILED'),
        'refundedAmount': sum(_amount(t) for t in transactions if t.type == 'REFUND' and t.status == 'COMPLETED'),
        'topPaymentMethod': top_method,
        'topPaymentMethodPercentage': js_round(top_amount / total_revenue * 100) if total_revenue > 0 else 0,
    }


def build_trends(transactions, start, end):
    days = {}
    cursor = start
    while cursor <= end:
        days[timezone.localtime(cursor).date().isoformat()] = {'revenue': 0, 'transactions': 0, 'refunds': 0}
        cursor += timedelta(days=1)

    for t in transactions:
        bucket = days.get(timezone.localtime(t.date).date().isoformat())
        if bucket is None or t.status != 'COMPLETED':
            continue
        if t.type in REVENUE_TYPES:
            bucket['revenue'] += _amount(t)
        elif t.type == 'REFUND':
            bucket['refunds'] += _amount(t)
        bucket['transactions'] += 1

    return [{'date': day, **values} for day, values in days.items()]


def build_by_source(transactions, previous, total_revenue):
    current = {label: 0 for _, label in SOURCE_TAGS}
    current[OTHER_SOURCE] = 0
    prior = dict(current)
    for rows, target in ((transactions, current), (previous, prior)):
        for t in rows:
            if is_revenue(t):
                target[revenue_source(t.reference)] += _amount(t)

    result = [
        {
            'source': source,
            'amount': amount,
            'percentage': amount / total_revenue * 100 if total_revenue > 0 else 0,
            'growth': growth(amount, prior[source]),
        }
        for source, amount in current.items()
    ]
    return sorted(result, key=lambda row: row['amount'], reverse=True)


def build_by_payment_method(transactions, total_revenue):
    amounts = defaultdict(float)
    counts = defaultdict(int)
    for t in transactions:
        if t.payment_method_id:
            amounts[t.payment_method.type] += _amount(t)
            counts[t.payment_method.type] += 1

    result = [
        {
            'method': method,
            'amount': amount,
            'percentage': amount / total_revenue * 100 if total_revenue > 0 else 0,
            'transactions': counts[method],
        }
        for method, amount in amounts.items()
    ]
    return sorted(result, key=lambda row: row['amount'], reverse=True)


def build_by_period(transactions, previous, period_length):
    months = defaultdict(lambda: {'revenue': 0, 'previousRevenue': 0})
    for t in transactions:
        if is_revenue(t):
            months[timezone.localtime(t.date).strftime(PERIOD_FORMAT)]['revenue'] += _amount(t)
    for t in previous:
        if is_revenue(t):
            # Compare against the month this sample lands in once shifted into the current window
            shifted = timezone.localtime(t.date + period_length).strftime(PERIOD_FORMAT)
            months[shifted]['previousRevenue'] += _amount(t)

    result = [
        {'period': period, 'revenue': data['revenue'], 'growth': growth(data['revenue'], data['previousRevenue'])}
        for period, data in months.items()
    ]
    return sorted(result, key=lambda row: datetime.strptime(row['period'], PERIOD_FORMAT))


def build_by_entity(transactions, previous, tag, names, id_field, name_field):
    """Attribute COMPLETED transactions to partners or advertisers by their reference tag."""
    current = defaultdict(float)
    prior = defaultdict(float)
    for rows, target in ((transactions, current), (previous, prior)):
        for t in rows:
            if t.status != 'COMPLETED':
                continue
            entity_id = _tag_value(t.reference, tag)
            if entity_id in names:
                target[entity_id] += _amount(t)

    group_total = sum(current.values())
    result = [
        {
            id_field: entity_id,
            name_field: names[entity_id],
            'revenue': revenue,
            'percentage': revenue / group_total * 100 if group_total > 0 else 0,
            'growth': growth(revenue, prior[entity_id]),
        }
        for entity_id, revenue in current.items()
        if revenue > 0
    ]
    return sorted(result, key=lambda row: row['revenue'], reverse=True)


def build_by_geography(transactions, previous):
    current = {region: 0 for region in REGIONS}
    prior = {region: 0 for region in REGIONS}
    for rows, target in ((transactions, current), (previous, prior)):
        for t in rows:
            if not is_revenue(t):
                continue
            region = revenue_region(t)
            if region in target:
                target[region] += _amount(t)

    group_total = sum(current.values())
    result = [
        {
            'region': region,
            'revenue': revenue,
            'percentage': revenue / group_total * 100 if group_total > 0 else 0,
            'growth': growth(revenue, prior[region]),
        }
        for region, revenue in current.items()
    ]
    return sorted(result, key=lambda row: row['revenue'], reverse=True)


def build_projections(total_revenue, revenue_growth, now=None):
    local = timezone.localtime(now or timezone.now())
    base_amount = total_revenue / 3
    multiplier = 1 + revenue_growth / 100
    projections = []
    for i in range(6):
        month_index = local.month - 1 + i
        label = datetime(local.year + month_index // 12, month_index % 12 + 1, 1).strftime(PERIOD_FORMAT)
        projections.append({
            'month': label,
            'projected': js_round(base_amount * multiplier ** i),
            'actual': None,
        })
    return projections


@monitor_query_performance
def build_revenue_report(start, end, now=None):
    from .serializers import RevenuePaymentSerializer, RevenueTransactionSerializer

    previous_start, previous_end = previous_period(start, end)
    transactions = AnalyticsRepository.transactions_between(start, end)
    previous = AnalyticsRepository.transactions_between(previous_start, previous_end)
    payments = AnalyticsRepository.payments_between(start, end)

    overview = build_overview(transactions, previous)
    total_revenue = overview['totalRevenue']

    return {
        'overview': overview,
        'trends': build_trends(transactions, start, end),
        'bySource': build_by_source(transactions, previous, total_revenue),
        'byPaymentMethod': build_by_payment_method(transactions, total_revenue),
        'transactions': RevenueTransactionSerializer(transactions, many=True).data,
        'payments': RevenuePaymentSerializer(payments, many=True).data,
        'byPeriod': build_by_period(transactions, previous, end - start),
        'byPartner': build_by_entity(transactions, previous, 'partner:', AnalyticsRepository.partner_names(),
                                     'partnerId', 'partnerName'),
        'byAdvertiser': build_by_entity(transactions, previous, 'adv:', AnalyticsRepository.advertiser_names(),
                                        'advertiserId', 'advertiserName'),
        'byGeography': build_by_geography(transactions, previous),
        'projections': build_projections(total_revenue, overview['revenueGrowth'], now),
    }


EXPORT_TYPES = ('overview', 'transactions', 'payments')


def _timestamp(value):
    return timezone.localtime(value).strftime('%Y-%m-%d %H:%M:%S') if value else ''


def export_rows(export_type, start, end):
    """Return ``(headers, rows)`` for a CSV export of the given type."""
    if export_type == 'transactions':
        headers = ['ID', 'Type', 'Amount', 'Currency', 'Status', 'Date', 'Processed At', 'Reference',
                   'Wallet ID', 'Payment Method ID', 'Payment Method Type', 'Payment Method Last4']
        rows = [
            [t.id, t.type, float(t.amount), t.currency, t.status, _timestamp(t.date), _timestamp(t.processed_at),
             t.reference or '', t.wallet_id or '', t.payment_method_id or '',
             t.payment_method.type if t.payment_method_id else '',
             (t.payment_method.last4 or '') if t.payment_method_id else '']
            for t in AnalyticsRepository.transactions_between(start, end)
        ]
        return headers, rows

    if export_type == 'payments':
        headers = ['ID', 'Type', 'Amount', 'Currency', 'Status', 'Date Initiated', 'Date Completed',
                   'Transaction ID', 'Advertiser', 'Partner', 'Description']
        rows = [
            [p.id, p.type, float(p.amount), p.currency, p.status, _timestamp(p.date_initiated),
             _timestamp(p.date_completed), p.transaction_id or '',
             p.advertiser.company_name if p.advertiser_id else '',
             p.partner.company_name if p.partner_id else '', p.description]
            for p in AnalyticsRepository.payments_between(start, end)
        ]
        return headers, rows

    transactions = AnalyticsRepository.transactions_between(start, end)
    headers = ['Date', 'Revenue', 'Refunds', 'Transactions']
    rows = [
        [row['date'], row['revenue'], row['refunds'], row['transactions']]
        for row in build_trends(transactions, start, end)
    ]
    return headers, rows
