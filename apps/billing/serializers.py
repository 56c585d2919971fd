from rest_framework import serializers
from .models import Billing, Payment, PaymentMethod, Transaction, Wallet


class PaymentMethodSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentMethod
        fields = ('id', 'type', 'details', 'status', 'is_default', 'is_verified', 'last4',
                  'exp_month', 'exp_year', 'last_used', 'created_at', 'updated_at')
        read_only_fields = ('status', 'is_verified', 'last_used', 'created_at', 'updated_at')

    def validate_exp_month(self, value):
        if value is not None and not 1 <= value <= 12:
            raise serializers.ValidationError('Expiry month must be between 1 and 12')
        return value


class TransactionSerializer(serializers.ModelSerializer):
    payment_method_type = serializers.CharField(source='payment_method.type', read_only=True, default=None)

    class Meta:
        model = Transaction
        fields = '__all__'


class WalletSerializer(serializers.ModelSerializer):
    payment_methods = PaymentMethodSerializer(many=True, read_only=True)

    class Meta:
        model = Wallet
        fields = '__all__'
        read_only_fields = ('partner', 'balance', 'pending_balance', 'currency', 'wallet_status',
                            'next_payout_date', 'last_updated', 'created_at')


class WithdrawalSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    method = serializers.CharField(required=False, allow_blank=True)
    accountDetails = serializers.DictField(required=False)


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = '__all__'


class ChargeSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=1)
    currency = serializers.CharField(max_length=3, default='USD')
    payment_method = serializers.IntegerField()
    description = serializers.CharField(required=False, allow_blank=True, default='Account deposit')


class BillingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Billing
        fields = '__all__'
