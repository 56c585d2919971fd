from decimal import Decimal

from django.db import transaction
from rest_framework import serializers
from .models import ABTest, ABTestVariant

ALLOCATION_TOLERANCE = Decimal('0.01')


class ABTestVariantSerializer(serializers.ModelSerializer):
    engagement_rate = serializers.FloatField(read_only=True)
    conversion_rate = serializers.FloatField(read_only=True)

    class Meta:
        model = ABTestVariant
        fields = ('id', 'ad_creative', 'name', 'traffic_allocation', 'impressions',
                  'engagements', 'conversions', 'engagement_rate', 'conversion_rate')
        read_only_fields = ('impressions', 'engagements', 'conversions')

    def validate_traffic_allocation(self, value):
        if value < 0 or value > 100:
            raise serializers.ValidationError('Traffic allocation must be between 0 and 100')
        return value


class ABTestSerializer(serializers.ModelSerializer):
    variants = ABTestVariantSerializer(many=True)

    class Meta:
        model = ABTest
        fields = '__all__'
        read_only_fields = ('status', 'end_date', 'winning_variant_id', 'created_at', 'updated_at')

    def validate_name(self, value):
        if len(value.strip()) < 3:
            raise serializers.ValidationError('Name must be at least 3 characters')
        return value

    def validate_campaign(self, value):
        advertiser = self.context.get('advertiser')
        if advertiser is not None and value.advertiser_id != advertiser.id:
            raise serializers.ValidationError('Campaign not found')
        return value

    def validate_variants(self, value):
        if len(value) < 2:
            raise serializers.ValidationError('An A/B test needs at least 2 variants')
        total = sum((variant['traffic_allocation'] for variant in value), Decimal('0'))
        if abs(total - 100) > ALLOCATION_TOLERANCE:
            raise serializers.ValidationError(f'Traffic allocations must sum to 100 (got {total})')
        return value

    def validate(self, data):
        campaign = data.get('campaign', getattr(self.instance, 'campaign', None))
        for variant in data.get('variants', []):
            if campaign is not None and variant['ad_creative'].campaign_id != campaign.id:
                raise serializers.ValidationError({'variants': 'Every variant creative must belong to the test campaign'})
        return data

    def create(self, validated_data):
        variants = validated_data.pop('variants')
        with transaction.atomic():
            ab_test = ABTest.objects.create(**validated_data)
            ABTestVariant.objects.bulk_create(
                [ABTestVariant(ab_test=ab_test, **variant) for variant in variants]
            )
        return ab_test

    def update(self, instance, validated_data):
        variants = validated_data.pop('variants', None)
        with transaction.atomic():
            instance = super().update(instance, validated_data)
            if variants is not None:
                instance.variants.all().delete()
                ABTestVariant.objects.bulk_create(
                    [ABTestVariant(ab_test=instance, **variant) for variant in variants]
                )
        return instance


class ABTestStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[choice[0] for choice in ABTest.STATUS_CHOICES])
