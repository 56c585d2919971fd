from django.db import models


class AdCreative(models.Model):
    TYPE_CHOICES = [
        ('IMAGE', 'Image'),
        ('VIDEO', 'Video'),
        ('TEXT', 'Text'),
        ('HTML', 'HTML'),
        ('INTERACTIVE', 'Interactive'),
        ('AR_EXPERIENCE', 'AR experience'),
        ('VOICE_INTERACTIVE', 'Voice interactive'),
    ]
    STATUS_CHOICES = [
        ('DRAFT', 'Draft'),
        ('PENDING_REVIEW', 'Pending review'),
        ('APPROVED', 'Approved'),
        ('REJECTED', 'Rejected'),
        ('ARCHIVED', 'Archived'),
    ]

    campaign = models.ForeignKey('campaigns.Campaign', on_delete=models.CASCADE, related_name='creatives')
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='IMAGE')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='DRAFT')
    content = models.CharField(max_length=1000, blank=True)  # asset URL or inline content
    format = models.CharField(max_length=50, blank=True)
    duration = models.IntegerField(null=True, blank=True)
    preview_image = models.CharField(max_length=1000, blank=True, null=True)
    headline = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    call_to_action = models.CharField(max_length=100, blank=True)
    is_approved = models.BooleanField(default=False)
    rejection_reason = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name
