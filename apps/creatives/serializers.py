from rest_framework import serializers
from .models import AdCreative


class AdCreativeSerializer(serializers.ModelSerializer):
    class Meta:
        model = AdCreative
        fields = '__all__'
        read_only_fields = ('status', 'is_approved', 'rejection_reason', 'created_at', 'updated_at')

    def validate_campaign(self, value):
        advertiser = self.context.get('advertiser')
        if advertiser is not None and value.advertiser_id != advertiser.id:
            raise serializers.ValidationError('Campaign not found')
        return value


class CreativeReviewSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=['APPROVED', 'REJECTED'])
    reason = serializers.CharField(required=False, allow_blank=True)

    def validate(self, data):
        if data['decision'] == 'REJECTED' and not data.get('reason'):
            raise serializers.ValidationError({'reason': 'A reason is required when rejecting a creative'})
        return data
