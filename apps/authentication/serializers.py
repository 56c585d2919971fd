from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.db import transaction
from rest_framework import serializers

from .models import AdminProfile, ApiKey, LoginHistory, User


class UserSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=False, min_length=8)

    class Meta:
        model = User
        fields = ('id', 'email', 'username', 'name', 'role', 'image', 'bio',
                  'is_active', 'password', 'date_joined', 'last_login')
        read_only_fields = ('date_joined', 'last_login')
        extra_kwargs = {'username': {'required': False}}

    def create(self, validated_data):
        password = validated_data.pop('password', None)
        validated_data.setdefault('username', validated_data['email'])
        with transaction.atomic():
            user = User.objects.create_user(password=password, **validated_data)
            if user.role == 'ADMIN':
                AdminProfile.objects.create(user=user, permissions=[])
        return user

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        instance = super().update(instance, validated_data)
        if password:
            instance.set_password(password)
            instance.save(update_fields=['password'])
        return instance


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8)
    role = serializers.ChoiceField(choices=['ADVERTISER', 'PARTNER'])
    username = serializers.CharField(required=False)

    def create(self, validated_data):
        from apps.advertisers.models import Advertiser
        from apps.partners.models import Partner

        name = validated_data['name']
        with transaction.atomic():
            user = User.objects.create_user(
                username=validated_data.get('username') or validated_data['email'],
                email=validated_data['email'],
                password=validated_data['password'],
                name=name,
                role=validated_data['role'],
            )
            if user.role == 'ADVERTISER':
                Advertiser.objects.create(
                    user=user,
                    company_name=f"{name}'s Company",
                    contact_person=name,
                )
            else:
                Partner.objects.create(
                    user=user,
                    company_name=f"{name}'s Venue",
                    contact_person=name,
                )
        return user


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()

    def validate(self, data):
        User = get_user_model()

        try:
            user = User.objects.get(email=data['email'])
        except User.DoesNotExist:
            raise serializers.ValidationError('Invalid credentials')

        if not user.check_password(data['password']):
            raise serializers.ValidationError('Invalid credentials')
        if not user.is_active:
            raise serializers.ValidationError('User account is disabled')
        data['user'] = user
        return data


class ProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ('id', 'email', 'name', 'role', 'image', 'bio', 'created_at')
        read_only_fields = ('id', 'role', 'created_at')

    def validate_email(self, value):
        exists = User.objects.filter(email__iexact=value).exclude(pk=self.instance.pk).exists()
        if exists:
            raise serializers.ValidationError('Email is already in use')
        return value


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField()
    new_password = serializers.CharField(min_length=8)
    confirm_password = serializers.CharField()

    def validate_current_password(self, value):
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError('Current password is incorrect')
        return value

    def validate(self, data):
        if data['new_password'] != data['confirm_password']:
            raise serializers.ValidationError({'confirm_password': "Passwords don't match"})
        validate_password(data['new_password'], self.context['request'].user)
        return data


class PasswordResetRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()


class PasswordResetConfirmSerializer(serializers.Serializer):
    uid = serializers.CharField()
    token = serializers.CharField()
    password = serializers.CharField(min_length=8)


class ApiKeySerializer(serializers.ModelSerializer):
    class Meta:
        model = ApiKey
        fields = ('id', 'name', 'prefix', 'permissions', 'last_used', 'expires_at', 'created_at')
        read_only_fields = ('prefix', 'last_used', 'created_at')

    def validate_name(self, value):
        if len(value.strip()) < 2:
            raise serializers.ValidationError('Name must be at least 2 characters.')
        return value


class LoginHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = LoginHistory
        fields = ('id', 'timestamp', 'ip_address', 'device', 'browser', 'status')
