from django.db import models
from django.utils import timezone


class ABTest(models.Model):
    STATUS_CHOICES = [
        ('DRAFT', 'Draft'),
        ('ACTIVE', 'Active'),
        ('PAUSED', 'Paused'),
        ('COMPLETED', 'Completed'),
        ('CANCELLED', 'Cancelled'),
    ]

    campaign = models.ForeignKey('campaigns.Campaign', on_delete=models.CASCADE, related_name='ab_tests')
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='DRAFT')
    start_date = models.DateTimeField(default=timezone.now)
    end_date = models.DateTimeField(null=True, blank=True)
    winning_variant_id = models.IntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def pick_winner(self):
        """Variant with the best engagement rate, or None without variants."""
        best, best_rate = None, -1
        for variant in self.variants.all():
            rate = variant.engagement_rate
            if rate > best_rate:
                best, best_rate = variant, rate
        return best.id if best else None

    def change_status(self, new_status):
        if new_status == 'COMPLETED':
            if self.end_date is None:
                self.end_date = timezone.now()
            if self.winning_variant_id is None:
                self.winning_variant_id = self.pick_winner()
        elif new_status == 'ACTIVE' and self.status == 'DRAFT':
            self.start_date = timezone.now()
        self.status = new_status
        self.save()


class ABTestVariant(models.Model):
    ab_test = models.ForeignKey(ABTest, on_delete=models.CASCADE, related_name='variants')
    ad_creative = models.ForeignKey('creatives.AdCreative', on_delete=models.CASCADE, related_name='ab_variants')
    name = models.CharField(max_length=255)
    traffic_allocation = models.DecimalField(max_digits=5, decimal_places=2)
    impressions = models.IntegerField(default=0)
    engagements = models.IntegerField(default=0)
    conversions = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    @property
    def engagement_rate(self):
        return self.engagements / self.impressions * 100 if self.impressions else 0

    @property
    def conversion_rate(self):
        return self.conversions / self.impressions * 100 if self.impressions else 0
