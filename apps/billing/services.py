import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from core.cache import delete_cache
from .models import PaymentMethod, Transaction, Wallet

logger = logging.getLogger(__name__)


class WalletError(Exception):
    def __init__(self, message, status=400):
        super().__init__(message)
        self.message = message
        self.status = status


def get_or_create_wallet(partner):
    wallet, created = Wallet.objects.get_or_create(partner=partner)
    if created:
        logger.info(f"Created wallet for partner {partner.id}")
    return wallet


def request_withdrawal(user, amount, method, account_details=None):
    """Create a PENDING withdrawal and debit the wallet in one database transaction."""
    try:
        amount = Decimal(str(amount))
    except (InvalidOperation, TypeError, ValueError):
        raise WalletError('Invalid amount')
    if not amount.is_finite() or amount <= 0:
        raise WalletError('Invalid amount')
    if not method:
        raise WalletError('Payment method is required')

    partner = getattr(user, 'partner', None)
    if partner is None:
        raise WalletError('Partner not found', status=404)

    with transaction.atomic():
        wallet = Wallet.objects.select_for_update().filter(partner=partner).first()
        if wallet is None:
            raise WalletError('Wallet not found', status=404)
        if wallet.wallet_status != 'ACTIVE':
            raise WalletError('Wallet is not active. Please contact support for assistance.', status=403)
        if amount > wallet.balance:
            raise WalletError('Insufficient balance')

        payment_method = PaymentMethod.objects.filter(wallet=wallet, type=method).first()
        if payment_method is None:
            raise WalletError('Payment method not found', status=404)

        now = timezone.now()
        withdrawal = Transaction.objects.create(
            wallet=wallet,
            type='WITHDRAWAL',
            amount=amount,
            currency=wallet.currency,
            status='PENDING',
            description=f"Withdrawal via {method}",
            reference=f"WD-{int(now.timestamp() * 1000)}",
            payment_method=payment_method,
            date=now,
            metadata=account_details or {},
        )
        wallet.balance -= amount
        wallet.save(update_fields=['balance', 'last_updated'])

    delete_cache(f"partner:wallet:{user.id}")
    logger.info(f"Withdrawal {withdrawal.reference} of {amount} requested by partner {partner.id}")

    return {
        'success': True,
        'message': 'Withdrawal request submitted successfully',
        'transaction': {
            'id': withdrawal.id,
            'type': withdrawal.type,
            'amount': float(withdrawal.amount),
            'currency': withdrawal.currency,
            'status': withdrawal.status,
            'description': withdrawal.description,
            'reference': withdrawal.reference,
            'date': withdrawal.date.isoformat(),
            'paymentMethod': method,
        },
        'wallet': {
            'balance': float(wallet.balance),
            'currency': wallet.currency,
        },
    }
