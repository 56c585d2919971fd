from django.conf import settings
from django.db import models


class SystemConfig(models.Model):
    config_key = models.CharField(max_length=255, unique=True)
    config_value = models.JSONField(default=dict)
    description = models.TextField(blank=True, null=True)
    is_encrypted = models.BooleanField(default=False)
    environment = models.CharField(max_length=50, blank=True, null=True)
    version = models.IntegerField(default=1)
    validation_schema = models.TextField(blank=True, null=True)
    updated_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='config_updates')
    created_at = models.DateTimeField(auto_now_add=True)
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['environment']),
        ]

    def __str__(self):
        return f"{self.config_key} v{self.version}"


class ConfigAuditLog(models.Model):
    config_key = models.CharField(max_length=255, db_index=True)
    previous_value = models.JSONField(null=True, blank=True)
    new_value = models.JSONField(null=True, blank=True)
    changed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='config_audit_logs')
    change_date = models.DateTimeField(auto_now_add=True, db_index=True)
    ip_address = models.CharField(max_length=255, blank=True, null=True)
    user_agent = models.TextField(blank=True, null=True)
    change_reason = models.TextField(blank=True, null=True)

    class Meta:
        ordering = ['-change_date', '-id']


class FeatureFlag(models.Model):
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True, default='')
    enabled = models.BooleanField(default=False)
    # Rollout share in percent; null means every caller
    percentage = models.IntegerField(null=True, blank=True)
    # e.g. {"userRole": "ADVERTISER"}
    conditions = models.JSONField(null=True, blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='feature_flags')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name
