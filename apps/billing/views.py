import logging

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.authentication.permissions import IsAdvertiser, IsPartner
from core.cache import delete_cache, get_cache, set_cache
from .gateway import GatewayError, process_stripe_payment
from .models import Billing, Payment, PaymentMethod, Transaction
from .serializers import (
    BillingSerializer,
    ChargeSerializer,
    PaymentMethodSerializer,
    PaymentSerializer,
    TransactionSerializer,
    WalletSerializer,
    WithdrawalSerializer,
)
from .services import WalletError, get_or_create_wallet, request_withdrawal

logger = logging.getLogger(__name__)

WALLET_CACHE_TTL = 120


def _first_of_next_month(moment):
    if moment.month == 12:
        return moment.replace(year=moment.year + 1, month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    return moment.replace(month=moment.month + 1, day=1, hour=0, minute=0, second=0, microsecond=0)


def _wallet_payload(partner):
    wallet = get_or_create_wallet(partner)
    data = WalletSerializer(wallet).data

    next_payout = wallet.next_payout_date
    if next_payout is None and wallet.auto_payout_enabled:
        next_payout = _first_of_next_month(timezone.now())
    data['next_payout_date'] = next_payout.isoformat() if next_payout else None

    data['recent_transactions'] = TransactionSerializer(wallet.transactions.all()[:5], many=True).data
    pending = partner.earnings.filter(status='PENDING').aggregate(total=Sum('amount'))['total']
    data['pending_earnings'] = float(pending or 0)
    return data


@api_view(['GET', 'PUT'])
@permission_classes([IsPartner])
def partner_wallet(request):
    cache_key = f"partner:wallet:{request.user.id}"
    partner = request.user.partner

    if request.method == 'PUT':
        wallet = get_or_create_wallet(partner)
        serializer = WalletSerializer(wallet, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        delete_cache(cache_key)
        return Response(_wallet_payload(partner))

    cached = get_cache(cache_key)
    if cached:
        return Response(cached)

    try:
        data = _wallet_payload(partner)
    except Exception as e:
        logger.error(f"Error fetching wallet data for user {request.user.id}: {e}")
        return Response({'error': 'Failed to fetch wallet data'}, status=500)

    set_cache(cache_key, data, WALLET_CACHE_TTL)
    return Response(data)


@api_view(['POST'])
@permission_classes([IsPartner])
def withdraw(request):
    serializer = WithdrawalSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Invalid amount'}, status=400)

    try:
        result = request_withdrawal(
            request.user,
            serializer.validated_data.get('amount'),
            serializer.validated_data.get('method'),
            serializer.validated_data.get('accountDetails'),
        )
    except WalletError as e:
        return Response({'error': e.message}, status=e.status)
    except Exception as e:
        logger.error(f"Error creating withdrawal request for user {request.user.id}: {e}")
        return Response({'error': 'Failed to create withdrawal request'}, status=500)
    return Response(result)


class WalletTransactionViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [IsPartner]
    serializer_class = TransactionSerializer

    def get_queryset(self):
        queryset = Transaction.objects.filter(wallet__partner=self.request.user.partner).select_related('payment_method')
        for param in ('type', 'status'):
            value = self.request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{param: value.upper()})
        return queryset


class PayoutHistoryViewSet(viewsets.ReadOnlyModelViewSet):
    """Withdrawals requested from the partner's wallet."""
    permission_classes = [IsPartner]
    serializer_class = TransactionSerializer

    def get_queryset(self):
        return Transaction.objects.filter(
            wallet__partner=self.request.user.partner, type='WITHDRAWAL'
        ).select_related('payment_method')


class PaymentMethodDefaultMixin:
    def _save_method(self, serializer, **owner):
        with transaction.atomic():
            method = serializer.save(**owner)
            if method.is_default:
                self.get_queryset().exclude(pk=method.pk).update(is_default=False)
        return method


class WalletPaymentMethodViewSet(PaymentMethodDefaultMixin, viewsets.ModelViewSet):
    permission_classes = [IsPartner]
    serializer_class = PaymentMethodSerializer
    queryset = PaymentMethod.objects.all()

    def get_queryset(self):
        return PaymentMethod.objects.filter(wallet__partner=self.request.user.partner).order_by('-is_default', '-created_at')

    def perform_create(self, serializer):
        self._save_method(serializer, wallet=get_or_create_wallet(self.request.user.partner))
        delete_cache(f"partner:wallet:{self.request.user.id}")

    def perform_update(self, serializer):
        self._save_method(serializer)
        delete_cache(f"partner:wallet:{self.request.user.id}")

    def perform_destroy(self, instance):
        instance.delete()
        delete_cache(f"partner:wallet:{self.request.user.id}")


class AdvertiserPaymentMethodViewSet(PaymentMethodDefaultMixin, viewsets.ModelViewSet):
    permission_classes = [IsAdvertiser]
    serializer_class = PaymentMethodSerializer
    queryset = PaymentMethod.objects.all()

    def get_queryset(self):
        return PaymentMethod.objects.filter(advertiser=self.request.user.advertiser).order_by('-is_default', '-created_at')

    def perform_create(self, serializer):
        self._save_method(serializer, advertiser=self.request.user.advertiser)

    def perform_update(self, serializer):
        self._save_method(serializer)


class AdvertiserInvoiceViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [IsAdvertiser]
    serializer_class = BillingSerializer

    def get_queryset(self):
        queryset = Billing.objects.filter(advertiser=self.request.user.advertiser)
        invoice_status = self.request.query_params.get('status')
        if invoice_status:
            queryset = queryset.filter(status=invoice_status.upper())
        return queryset


class AdvertiserPaymentViewSet(mixins.CreateModelMixin, viewsets.ReadOnlyModelViewSet):
    permission_classes = [IsAdvertiser]
    serializer_class = PaymentSerializer

    def get_queryset(self):
        return Payment.objects.filter(advertiser=self.request.user.advertiser)

    def create(self, request, *args, **kwargs):
        """Charge a saved card through the payment gateway."""
        serializer = ChargeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        advertiser = request.user.advertiser

        payment_method = PaymentMethod.objects.filter(
            pk=serializer.validated_data['payment_method'], advertiser=advertiser
        ).first()
        if payment_method is None:
            return Response({'error': 'Payment method not found'}, status=404)

        try:
            result = process_stripe_payment(
                advertiser,
                serializer.validated_data['amount'],
                serializer.validated_data['currency'],
                payment_method,
                serializer.validated_data['description'],
            )
        except GatewayError as e:
            return Response({'error': f"Payment failed: {e}"}, status=status.HTTP_402_PAYMENT_REQUIRED)

        return Response(result, status=status.HTTP_201_CREATED if result['success'] else status.HTTP_202_ACCEPTED)
