from rest_framework import serializers
from .models import Device, DeviceAnalytics


class DeviceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Device
        fields = '__all__'
        read_only_fields = ('partner', 'impressions', 'revenue', 'last_active', 'created_at', 'updated_at')


class DeviceAdminSerializer(serializers.ModelSerializer):
    partner_name = serializers.CharField(source='partner.company_name', read_only=True)

    class Meta:
        model = Device
        fields = '__all__'


class DeviceAnalyticsSerializer(serializers.ModelSerializer):
    class Meta:
        model = DeviceAnalytics
        fields = '__all__'
