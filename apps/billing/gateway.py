# apps/billing/gateway.py
import logging
from decimal import Decimal, ROUND_HALF_UP

import stripe
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from core.circuit_breaker import CircuitBreaker, CircuitOpenError
from .models import Payment, Transaction

logger = logging.getLogger(__name__)

# Card declines and bad requests are per-customer and do not count against the provider
stripe_circuit = CircuitBreaker(
    failure_threshold=5,
    recovery_timeout=60,
    expected_exception=(stripe.APIConnectionError, stripe.APIError, stripe.RateLimitError),
)


class GatewayError(Exception):
    pass


def to_minor_units(amount):
    return int((Decimal(str(amount)) * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


@stripe_circuit
@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=4, max=10),
    retry=retry_if_exception_type(stripe.APIConnectionError),
    reraise=True,
)
def create_payment_intent(amount, currency, payment_method_id, customer_id, description):
    stripe.api_key = settings.STRIPE_SECRET_KEY
    return stripe.PaymentIntent.create(
        amount=to_minor_units(amount),
        currency=currency.lower(),
        payment_method=payment_method_id,
        customer=customer_id,
        description=description,
        confirm=True,
        automatic_payment_methods={'enabled': True, 'allow_redirects': 'never'},
    )


def process_stripe_payment(advertiser, amount, currency, payment_method, description):
    """Charge an advertiser's saved Stripe method and record the outcome.

    A succeeded intent yields a COMPLETED ``Payment`` plus the matching
    revenue ``Transaction``. Any gateway error records a FAILED payment and
    is re-raised as ``GatewayError``.
    """
    if not settings.STRIPE_SECRET_KEY:
        raise GatewayError('Payment gateway is not configured')

    details = payment_method.details or {}
    payment_method_id = details.get('stripePaymentMethodId')
    customer_id = details.get('stripeCustomerId')
    metadata = {'customerId': customer_id, 'paymentMethodId': payment_method_id}

    try:
        intent = create_payment_intent(amount, currency, payment_method_id, customer_id, description)
    except (stripe.StripeError, CircuitOpenError) as e:
        logger.error(f"Stripe payment failed for advertiser {advertiser.id}: {e}")
        Payment.objects.create(
            advertiser=advertiser,
            amount=amount,
            currency=currency,
            status='FAILED',
            type='DEPOSIT',
            description=description,
            payment_method=payment_method,
            metadata={**metadata, 'error': str(e)},
        )
        raise GatewayError(str(e)) from e

    if intent.status != 'succeeded':
        payment = Payment.objects.create(
            advertiser=advertiser,
            amount=amount,
            currency=currency,
            status='PENDING',
            type='DEPOSIT',
            description=description,
            payment_method=payment_method,
            transaction_id=intent.id,
            metadata=metadata,
        )
        return {
            'success': False,
            'paymentId': payment.id,
            'status': intent.status,
            'clientSecret': intent.client_secret,
            'message': 'Payment requires additional action or is still processing',
        }

    now = timezone.now()
    with transaction.atomic():
        payment = Payment.objects.create(
            advertiser=advertiser,
            amount=amount,
            currency=currency,
            status='COMPLETED',
            type='DEPOSIT',
            description=description,
            payment_method=payment_method,
            transaction_id=intent.id,
            date_completed=now,
            metadata=metadata,
        )
        Transaction.objects.create(
            type='DEPOSIT',
            amount=amount,
            currency=currency,
            status='COMPLETED',
            description=description,
            reference=f"adv:{advertiser.id}:deposit:{payment.id}",
            payment_method=payment_method,
            date=now,
            processed_at=now,
        )
        payment_method.last_used = now
        payment_method.save(update_fields=['last_used'])

    logger.info(f"Stripe payment {intent.id} completed for advertiser {advertiser.id}")
    return {
        'success': True,
        'paymentId': payment.id,
        'transactionId': intent.id,
        'status': 'COMPLETED',
    }
