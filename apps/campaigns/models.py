from django.db import models
from django.core.exceptions import ValidationError
from django.utils import timezone


class Campaign(models.Model):
    class Meta:
        app_label = 'campaigns'
        constraints = [
            models.UniqueConstraint(
                fields=['advertiser', 'name'],
                name='unique_campaign_name_per_advertiser'
            )
        ]
        indexes = [
            models.Index(fields=['advertiser', 'status']),
            models.Index(fields=['status', 'start_date']),
        ]

    STATUS_CHOICES = [
        ('DRAFT', 'Draft'),
        ('PENDING_APPROVAL', 'Pending approval'),
        ('ACTIVE', 'Active'),
        ('PAUSED', 'Paused'),
        ('COMPLETED', 'Completed'),
        ('REJECTED', 'Rejected'),
        ('CANCELLED', 'Cancelled'),
    ]
    OBJECTIVE_CHOICES = [
        ('AWARENESS', 'Awareness'),
        ('CONSIDERATION', 'Consideration'),
        ('CONVERSION', 'Conversion'),
        ('TRAFFIC', 'Traffic'),
        ('ENGAGEMENT', 'Engagement'),
    ]
    PRICING_CHOICES = [
        ('CPM', 'Cost per mille'),
        ('CPE', 'Cost per engagement'),
        ('CPA', 'Cost per action'),
        ('HYBRID', 'Hybrid'),
    ]

    advertiser = models.ForeignKey('advertisers.Advertiser', on_delete=models.CASCADE, related_name='campaigns')
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='DRAFT')
    objective = models.CharField(max_length=20, choices=OBJECTIVE_CHOICES, default='AWARENESS')
    budget = models.DecimalField(max_digits=10, decimal_places=2)
    daily_budget = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField(null=True, blank=True)
    target_locations = models.JSONField(default=list, blank=True)
    target_schedule = models.JSONField(default=dict, blank=True)
    target_demographics = models.JSONField(default=dict, blank=True)
    pricing_model = models.CharField(max_length=10, choices=PRICING_CHOICES, default='CPM')
    audience_segment = models.ForeignKey('audiences.AudienceSegment', on_delete=models.SET_NULL,
                                         null=True, blank=True, related_name='campaigns')
    rejection_reason = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def clean(self):
        if self.end_date and self.start_date and self.start_date >= self.end_date:
            raise ValidationError("start_date must be before end_date")
        if self.daily_budget is not None and self.budget is not None and self.daily_budget > self.budget:
            raise ValidationError("daily_budget cannot exceed budget")

    def can_transition_to(self, new_status):
        """Validate status transitions"""
        valid_transitions = {
            'DRAFT': ['PENDING_APPROVAL', 'CANCELLED'],
            'PENDING_APPROVAL': ['ACTIVE', 'REJECTED', 'CANCELLED'],
            'ACTIVE': ['PAUSED', 'COMPLETED', 'CANCELLED'],
            'PAUSED': ['ACTIVE', 'COMPLETED', 'CANCELLED'],
            'COMPLETED': [],  # Terminal state
            'REJECTED': ['DRAFT'],
            'CANCELLED': ['DRAFT'],
        }
        return new_status in valid_transitions.get(self.status, [])

    def save(self, *args, **kwargs):
        if self.pk:  # Updating existing
            old_status = Campaign.objects.filter(pk=self.pk).values_list('status', flat=True).first()
            if old_status is not None and old_status != self.status:
                previous = Campaign(status=old_status)
                if not previous.can_transition_to(self.status):
                    raise ValidationError(
                        f"Cannot transition from {old_status} to {self.status}"
                    )
        self.clean()
        super().save(*args, **kwargs)


class AdDelivery(models.Model):
    STATUS_CHOICES = [
        ('SCHEDULED', 'Scheduled'),
        ('DELIVERED', 'Delivered'),
        ('FAILED', 'Failed'),
        ('SKIPPED', 'Skipped'),
        ('PENDING', 'Pending'),
    ]

    class Meta:
        app_label = 'campaigns'
        verbose_name_plural = 'ad deliveries'
        indexes = [
            models.Index(fields=['device', 'status', 'scheduled_time']),
            models.Index(fields=['campaign', 'scheduled_time']),
        ]

    campaign = models.ForeignKey(Campaign, on_delete=models.CASCADE, related_name='deliveries')
    ad_creative = models.ForeignKey('creatives.AdCreative', on_delete=models.CASCADE, related_name='deliveries')
    device = models.ForeignKey('devices.Device', on_delete=models.CASCADE, related_name='deliveries')
    scheduled_time = models.DateTimeField(default=timezone.now)
    actual_delivery_time = models.DateTimeField(null=True, blank=True)
    viewer_count = models.IntegerField(default=0)
    impressions = models.IntegerField(default=0)
    engagements = models.IntegerField(default=0)
    completions = models.IntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='SCHEDULED')
    location_data = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
