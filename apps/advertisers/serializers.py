from rest_framework import serializers
from .models import Advertiser


class AdvertiserSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source='user.email', read_only=True)
    name = serializers.CharField(source='user.name', read_only=True)
    campaign_count = serializers.SerializerMethodField()

    class Meta:
        model = Advertiser
        fields = '__all__'
        read_only_fields = ('user', 'created_at', 'updated_at')

    def get_campaign_count(self, obj):
        return obj.campaigns.count()
