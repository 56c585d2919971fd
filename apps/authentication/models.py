import hashlib
import secrets

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    ROLE_CHOICES = [
        ('ADMIN', 'Admin'),
        ('ADVERTISER', 'Advertiser'),
        ('PARTNER', 'Partner'),
    ]

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255, blank=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='ADVERTISER')
    image = models.URLField(max_length=500, blank=True, null=True)
    bio = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    def __str__(self):
        return self.email

    @property
    def display_name(self):
        return self.name or self.email


class AdminProfile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='admin_profile')
    # List of granted areas, e.g. ["ALL"] or ["settings", "users"]
    permissions = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def has_permission(self, permission):
        granted = self.permissions or []
        if isinstance(granted, dict):
            return bool(granted.get('ALL') or granted.get(permission))
        upper = [str(p).upper() for p in granted]
        return 'ALL' in upper or permission.upper() in upper


class ApiKey(models.Model):
    KEY_PREFIX = 'lumen_'

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='api_keys')
    name = models.CharField(max_length=100)
    prefix = models.CharField(max_length=16, db_index=True)
    hashed_key = models.CharField(max_length=64, unique=True)
    permissions = models.JSONField(default=dict, blank=True)
    last_used = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    @staticmethod
    def hash_key(raw_key):
        return hashlib.sha256(raw_key.encode('utf-8')).hexdigest()

    @classmethod
    def generate(cls, user, name, permissions=None, expires_at=None):
        """Create a key and return ``(instance, raw_key)``; the raw key is never stored."""
        raw_key = f"{cls.KEY_PREFIX}{secrets.token_hex(32)}"
        instance = cls.objects.create(
            user=user,
            name=name,
            prefix=raw_key[:len(cls.KEY_PREFIX) + 6],
            hashed_key=cls.hash_key(raw_key),
            permissions=permissions or {'read': True, 'write': False, 'delete': False},
            expires_at=expires_at,
        )
        return instance, raw_key


class LoginHistory(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='login_history')
    timestamp = models.DateTimeField(auto_now_add=True)
    ip_address = models.CharField(max_length=45, blank=True, null=True)
    device = models.CharField(max_length=100, blank=True)
    browser = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=20, default='success')

    class Meta:
        ordering = ['-timestamp']
        verbose_name_plural = 'login history'
