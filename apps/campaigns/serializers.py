from rest_framework import serializers
from apps.advertisers.models import Advertiser
from .models import Campaign, AdDelivery


class CampaignSerializer(serializers.ModelSerializer):
    advertiser = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Campaign
        fields = '__all__'
        read_only_fields = ('status', 'rejection_reason', 'created_at', 'updated_at')

    def validate_name(self, value):
        advertiser = self.context.get('advertiser')
        if advertiser is None and self.instance is not None:
            advertiser = self.instance.advertiser

        if advertiser is not None:
            existing_campaign = Campaign.objects.filter(advertiser=advertiser, name=value)
            if self.instance is not None:
                # For updates, exclude current instance from the check
                existing_campaign = existing_campaign.exclude(pk=self.instance.pk)

            if existing_campaign.exists():
                raise serializers.ValidationError(
                    f"A campaign with name '{value}' already exists for this advertiser."
                )

        return value

    def validate_budget(self, value):
        if value <= 0:
            raise serializers.ValidationError('Budget must be greater than zero')
        return value

    def validate(self, data):
        start = data.get('start_date', getattr(self.instance, 'start_date', None))
        end = data.get('end_date', getattr(self.instance, 'end_date', None))
        if start and end and start >= end:
            raise serializers.ValidationError({'end_date': 'End date must be after start date'})
        return data


class CampaignAdminSerializer(CampaignSerializer):
    advertiser = serializers.PrimaryKeyRelatedField(queryset=Advertiser.objects.all())
    advertiser_name = serializers.CharField(source='advertiser.company_name', read_only=True)

    class Meta(CampaignSerializer.Meta):
        read_only_fields = ('status', 'created_at', 'updated_at')


class CampaignStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[choice[0] for choice in Campaign.STATUS_CHOICES])
    reason = serializers.CharField(required=False, allow_blank=True)


class AdDeliverySerializer(serializers.ModelSerializer):
    class Meta:
        model = AdDelivery
        fields = '__all__'
