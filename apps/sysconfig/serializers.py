from rest_framework import serializers
from .models import FeatureFlag


class FeatureFlagSerializer(serializers.ModelSerializer):
    created_by_email = serializers.EmailField(source='created_by.email', read_only=True, default=None)

    class Meta:
        model = FeatureFlag
        fields = '__all__'
        read_only_fields = ('created_by', 'created_at', 'updated_at')

    def validate_percentage(self, value):
        if value is not None and not 0 <= value <= 100:
            raise serializers.ValidationError('Percentage must be between 0 and 100')
        return value
