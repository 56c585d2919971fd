from rest_framework import serializers
from .models import Partner, PartnerEarning


class PartnerSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source='user.email', read_only=True)
    name = serializers.CharField(source='user.name', read_only=True)

    class Meta:
        model = Partner
        fields = '__all__'
        read_only_fields = ('user', 'created_at', 'updated_at')


class PartnerProfileSerializer(PartnerSerializer):
    """Self-service profile; commercial terms are admin-managed."""

    class Meta(PartnerSerializer.Meta):
        read_only_fields = ('user', 'commission_rate', 'status', 'verification_status',
                            'created_at', 'updated_at')


class PartnerEarningSerializer(serializers.ModelSerializer):
    class Meta:
        model = PartnerEarning
        fields = '__all__'
        read_only_fields = ('partner',)


class PayoutRequestSerializer(serializers.Serializer):
    earning_id = serializers.IntegerField()
    method = serializers.ChoiceField(choices=['BANK_TRANSFER', 'PAYPAL'])
    details = serializers.DictField(required=False)
