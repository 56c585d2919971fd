from django.db import models


class EmotionData(models.Model):
    """Aggregated viewer emotion sample captured by a device while a creative played."""
    ad_creative = models.ForeignKey('creatives.AdCreative', on_delete=models.CASCADE, related_name='emotion_data')
    device = models.ForeignKey('devices.Device', on_delete=models.SET_NULL, null=True, blank=True,
                               related_name='emotion_data')
    timestamp = models.DateTimeField(db_index=True)
    joy_score = models.FloatField(null=True, blank=True)
    surprise_score = models.FloatField(null=True, blank=True)
    neutral_score = models.FloatField(null=True, blank=True)
    dwell_time = models.FloatField(null=True, blank=True)
    viewer_count = models.IntegerField(default=0)
    is_aggregated = models.BooleanField(default=True)

    class Meta:
        ordering = ['-timestamp']
        verbose_name_plural = 'emotion data'


class CampaignAnalytics(models.Model):
    campaign = models.ForeignKey('campaigns.Campaign', on_delete=models.CASCADE, related_name='analytics')
    date = models.DateField()
    impressions = models.IntegerField(default=0)
    engagements = models.IntegerField(default=0)
    completions = models.IntegerField(default=0)
    viewer_count = models.IntegerField(default=0)
    deliveries = models.IntegerField(default=0)
    engagement_rate = models.FloatField(default=0)
    completion_rate = models.FloatField(default=0)
    cost = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['campaign', 'date'], name='unique_campaign_analytics_per_day')
        ]
        indexes = [
            models.Index(fields=['campaign', 'date']),
        ]
        verbose_name_plural = 'campaign analytics'
