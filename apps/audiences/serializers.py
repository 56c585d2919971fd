from rest_framework import serializers
from .models import AudienceSegment


class AudienceSegmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = AudienceSegment
        fields = '__all__'
        read_only_fields = ('created_by', 'created_at', 'updated_at')

    def validate_rules(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('Rules must be an object')
        return value
