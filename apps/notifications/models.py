from django.conf import settings
from django.db import models


class Notification(models.Model):
    TYPE_CHOICES = [
        ('SYSTEM', 'System'),
        ('CAMPAIGN', 'Campaign'),
        ('CREATIVE', 'Creative'),
        ('PAYMENT', 'Payment'),
        ('DEVICE', 'Device'),
        ('SECURITY', 'Security'),
        ('ACCOUNT', 'Account'),
    ]
    PRIORITY_CHOICES = [
        ('LOW', 'Low'),
        ('NORMAL', 'Normal'),
        ('HIGH', 'High'),
        ('URGENT', 'Urgent'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications')
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                               related_name='sent_notifications')
    title = models.CharField(max_length=255)
    message = models.TextField()
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='SYSTEM')
    # Preference bucket, see NotificationPreference.CATEGORY_FIELDS
    category = models.CharField(max_length=30, default='system')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='NORMAL')
    related_data = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'is_read', 'created_at']),
        ]


class NotificationPreference(models.Model):
    CATEGORY_FIELDS = {
        'payment': 'payment_notifications',
        'maintenance': 'maintenance_alerts',
        'campaign': 'campaign_updates',
        'performance': 'performance_reports',
        'security': 'security_alerts',
        'marketing': 'marketing_emails',
        'system': 'system_updates',
        'device': 'device_offline_alerts',
        'new_campaign': 'new_campaign_notifications',
        'payment_failure': 'payment_failure_alerts',
        'document_expiry': 'document_expiry_reminders',
    }

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE,
                                related_name='notification_preference')
    email = models.BooleanField(default=True)
    sms = models.BooleanField(default=True)
    push = models.BooleanField(default=False)
    payment_notifications = models.BooleanField(default=True)
    maintenance_alerts = models.BooleanField(default=True)
    campaign_updates = models.BooleanField(default=False)
    performance_reports = models.BooleanField(default=True)
    security_alerts = models.BooleanField(default=True)
    marketing_emails = models.BooleanField(default=False)
    system_updates = models.BooleanField(default=True)
    device_offline_alerts = models.BooleanField(default=True)
    new_campaign_notifications = models.BooleanField(default=False)
    payment_failure_alerts = models.BooleanField(default=True)
    document_expiry_reminders = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        self.security_alerts = True  # cannot be opted out of
        super().save(*args, **kwargs)

    def allows(self, category):
        field = self.CATEGORY_FIELDS.get(category)
        return True if field is None else getattr(self, field)
