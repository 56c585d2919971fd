from django.db import models


class Device(models.Model):
    TYPE_CHOICES = [
        ('ANDROID_TV', 'Android TV'),
        ('DIGITAL_SIGNAGE', 'Digital signage'),
        ('INTERACTIVE_KIOSK', 'Interactive kiosk'),
        ('VEHICLE_MOUNTED', 'Vehicle mounted'),
        ('RETAIL_DISPLAY', 'Retail display'),
        ('BUS', 'Bus'),
        ('TRAM', 'Tram'),
        ('TRAIN', 'Train'),
        ('METRO', 'Metro'),
        ('OTHER', 'Other'),
    ]
    STATUS_CHOICES = [
        ('PENDING', 'Pending'),
        ('ACTIVE', 'Active'),
        ('INACTIVE', 'Inactive'),
        ('SUSPENDED', 'Suspended'),
        ('MAINTENANCE', 'Maintenance'),
    ]
    HEALTH_CHOICES = [
        ('UNKNOWN', 'Unknown'),
        ('HEALTHY', 'Healthy'),
        ('WARNING', 'Warning'),
        ('CRITICAL', 'Critical'),
        ('OFFLINE', 'Offline'),
    ]

    partner = models.ForeignKey('partners.Partner', on_delete=models.CASCADE, related_name='devices')
    name = models.CharField(max_length=255)
    device_identifier = models.CharField(max_length=255, unique=True)
    device_type = models.CharField(max_length=30, choices=TYPE_CHOICES, default='DIGITAL_SIGNAGE')
    # {"latitude", "longitude", "address", "continent", ...}
    location = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='PENDING')
    last_active = models.DateTimeField(null=True, blank=True)
    health_status = models.CharField(max_length=20, choices=HEALTH_CHOICES, default='UNKNOWN')
    firmware_version = models.CharField(max_length=50, blank=True)
    impressions = models.IntegerField(default=0)
    revenue = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['partner', 'status']),
        ]

    def __str__(self):
        return self.name


class DeviceAnalytics(models.Model):
    device = models.ForeignKey(Device, on_delete=models.CASCADE, related_name='analytics')
    date = models.DateField()
    uptime = models.FloatField(default=0)
    impressions_served = models.IntegerField(default=0)
    engagements_count = models.IntegerField(default=0)
    average_viewer_count = models.FloatField(default=0)
    performance_metrics = models.JSONField(default=dict, blank=True)
    energy_consumption = models.FloatField(null=True, blank=True)

    class Meta:
        ordering = ['-date']
        constraints = [
            models.UniqueConstraint(fields=['device', 'date'], name='unique_device_analytics_per_day')
        ]
        verbose_name_plural = 'device analytics'
