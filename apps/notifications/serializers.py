from rest_framework import serializers
from .models import Notification, NotificationPreference


class NotificationSerializer(serializers.ModelSerializer):
    sender_name = serializers.CharField(source='sender.name', read_only=True, default=None)

    class Meta:
        model = Notification
        exclude = ('user',)
        read_only_fields = ('sender', 'title', 'message', 'type', 'category', 'priority', 'related_data',
                            'read_at', 'created_at')


class NotificationPreferenceSerializer(serializers.ModelSerializer):
    class Meta:
        model = NotificationPreference
        exclude = ('user',)
        read_only_fields = ('security_alerts', 'created_at', 'updated_at')


class ContactSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    subject = serializers.CharField(max_length=255)
    message = serializers.CharField(min_length=10, max_length=5000)
    company = serializers.CharField(max_length=255, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=50, required=False, allow_blank=True)
