from rest_framework import serializers
from apps.billing.models import Payment, Transaction
from .models import CampaignAnalytics, EmotionData


class CampaignAnalyticsSerializer(serializers.ModelSerializer):
    class Meta:
        model = CampaignAnalytics
        fields = '__all__'


class EmotionDataSerializer(serializers.ModelSerializer):
    class Meta:
        model = EmotionData
        fields = '__all__'


class RevenueTransactionSerializer(serializers.ModelSerializer):
    payment_method_type = serializers.CharField(source='payment_method.type', read_only=True, default=None)
    payment_method_last4 = serializers.CharField(source='payment_method.last4', read_only=True, default=None)

    class Meta:
        model = Transaction
        fields = ('id', 'type', 'amount', 'currency', 'status', 'description', 'reference', 'date',
                  'processed_at', 'wallet', 'payment_method', 'payment_method_type', 'payment_method_last4')


class RevenuePaymentSerializer(serializers.ModelSerializer):
    advertiser_name = serializers.CharField(source='advertiser.company_name', read_only=True, default=None)
    partner_name = serializers.CharField(source='partner.company_name', read_only=True, default=None)

    class Meta:
        model = Payment
        fields = ('id', 'amount', 'currency', 'status', 'type', 'description', 'date_initiated',
                  'date_completed', 'transaction_id', 'advertiser', 'advertiser_name', 'partner', 'partner_name')
