from decimal import Decimal

from django.db import models
from django.utils import timezone


class Wallet(models.Model):
    STATUS_CHOICES = [
        ('ACTIVE', 'Active'),
        ('SUSPENDED', 'Suspended'),
        ('LOCKED', 'Locked'),
    ]

    partner = models.OneToOneField('partners.Partner', on_delete=models.CASCADE, related_name='wallet')
    balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    pending_balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    currency = models.CharField(max_length=3, default='USD')
    wallet_status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='ACTIVE')
    auto_payout_enabled = models.BooleanField(default=False)
    payout_threshold = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('100'))
    next_payout_date = models.DateTimeField(null=True, blank=True)
    last_updated = models.DateTimeField(auto_now=True)
    created_at = models.DateTimeField(auto_now_add=True)


class PaymentMethod(models.Model):
    TYPE_CHOICES = [
        ('VISA', 'Visa'),
        ('MASTERCARD', 'Mastercard'),
        ('AMEX', 'American Express'),
        ('OTHER', 'Other'),
        ('BANK_TRANSFER', 'Bank transfer'),
        ('MPESA', 'M-Pesa'),
        ('FLUTTERWAVE', 'Flutterwave'),
        ('PAYPAL', 'PayPal'),
        ('STRIPE', 'Stripe'),
        ('CREDIT_CARD', 'Credit card'),
    ]
    STATUS_CHOICES = [
        ('ACTIVE', 'Active'),
        ('UNVERIFIED', 'Unverified'),
        ('SUSPENDED_TEMPORARY', 'Suspended (temporary)'),
        ('SUSPENDED_PERMANENT', 'Suspended (permanent)'),
    ]

    wallet = models.ForeignKey(Wallet, on_delete=models.CASCADE, null=True, blank=True, related_name='payment_methods')
    advertiser = models.ForeignKey('advertisers.Advertiser', on_delete=models.CASCADE, null=True, blank=True,
                                   related_name='payment_methods')
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    # Provider references (e.g. stripePaymentMethodId, stripeCustomerId) or payout account details
    details = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default='ACTIVE')
    is_default = models.BooleanField(default=False)
    is_verified = models.BooleanField(default=False)
    last4 = models.CharField(max_length=4, blank=True, null=True)
    exp_month = models.IntegerField(null=True, blank=True)
    exp_year = models.IntegerField(null=True, blank=True)
    last_used = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)


class Transaction(models.Model):
    TYPE_CHOICES = [
        ('DEPOSIT', 'Deposit'),
        ('WITHDRAWAL', 'Withdrawal'),
        ('PAYMENT', 'Payment'),
        ('REFUND', 'Refund'),
        ('ADJUSTMENT', 'Adjustment'),
    ]
    STATUS_CHOICES = [
        ('PENDING', 'Pending'),
        ('PROCESSING', 'Processing'),
        ('COMPLETED', 'Completed'),
        ('FAILED', 'Failed'),
        ('CANCELLED', 'Cancelled'),
    ]

    # Platform-level transactions (advertiser deposits, fees) have no wallet
    wallet = models.ForeignKey(Wallet, on_delete=models.CASCADE, null=True, blank=True, related_name='transactions')
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default='USD')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='PENDING')
    description = models.TextField(blank=True)
    # Free-text attribution, e.g. "adv:12:campaign-deposit" or "partner:7:commission"
    reference = models.CharField(max_length=255, blank=True, null=True)
    payment_method = models.ForeignKey(PaymentMethod, on_delete=models.SET_NULL, null=True, blank=True,
                                       related_name='transactions')
    date = models.DateTimeField(default=timezone.now)
    processed_at = models.DateTimeField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date']
        indexes = [
            models.Index(fields=['status', 'type', 'date']),
            models.Index(fields=['wallet', 'date']),
        ]


class Payment(models.Model):
    STATUS_CHOICES = [
        ('PENDING', 'Pending'),
        ('COMPLETED', 'Completed'),
        ('FAILED', 'Failed'),
        ('REFUNDED', 'Refunded'),
        ('PROCESSED', 'Processed'),
        ('PAID', 'Paid'),
        ('CANCELLED', 'Cancelled'),
    ]
    TYPE_CHOICES = [
        ('DEPOSIT', 'Deposit'),
        ('WITHDRAWAL', 'Withdrawal'),
        ('REFUND', 'Refund'),
        ('TRANSFER', 'Transfer'),
        ('FEE', 'Fee'),
    ]

    partner = models.ForeignKey('partners.Partner', on_delete=models.SET_NULL, null=True, blank=True,
                                related_name='payments')
    advertiser = models.ForeignKey('advertisers.Advertiser', on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='payments')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default='USD')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='PENDING')
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='DEPOSIT')
    description = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    payment_method = models.ForeignKey(PaymentMethod, on_delete=models.SET_NULL, null=True, blank=True,
                                       related_name='payments')
    date_initiated = models.DateTimeField(default=timezone.now)
    date_completed = models.DateTimeField(null=True, blank=True)
    transaction_id = models.CharField(max_length=255, blank=True, null=True)
    receipt_url = models.CharField(max_length=500, blank=True, null=True)

    class Meta:
        ordering = ['-date_initiated']


class Billing(models.Model):
    STATUS_CHOICES = [
        ('UNPAID', 'Unpaid'),
        ('PAID', 'Paid'),
        ('OVERDUE', 'Overdue'),
        ('CANCELLED', 'Cancelled'),
        ('PARTIALLY_PAID', 'Partially paid'),
    ]

    advertiser = models.ForeignKey('advertisers.Advertiser', on_delete=models.CASCADE, related_name='invoices')
    campaign = models.ForeignKey('campaigns.Campaign', on_delete=models.SET_NULL, null=True, blank=True,
                                 related_name='invoices')
    payment = models.ForeignKey(Payment, on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices')
    invoice_number = models.CharField(max_length=50, unique=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    total = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='UNPAID')
    due_date = models.DateTimeField()
    items = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
