import random
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from apps.abtests.models import ABTest, ABTestVariant
from apps.advertisers.models import Advertiser
from apps.analytics.models import EmotionData
from apps.authentication.models import AdminProfile, User
from apps.billing.models import PaymentMethod, Transaction, Wallet
from apps.campaigns.models import AdDelivery, Campaign
from apps.creatives.models import AdCreative
from apps.devices.models import Device
from apps.partners.models import Partner

CONTINENTS = ['North America', 'Europe', 'Asia', 'Africa', 'South America', 'Oceania']
CREATIVE_TYPES = ['IMAGE', 'VIDEO', 'INTERACTIVE']


class Command(BaseCommand):
    help = 'Load demo advertisers, partners, deliveries and transactions for the dashboards'

    def add_arguments(self, parser):
        parser.add_argument('--advertisers', type=int, default=5)
        parser.add_argument('--partners', type=int, default=5)
        parser.add_argument('--deliveries', type=int, default=5000, help='Number of ad deliveries to create')
        parser.add_argument('--batch_size', type=int, default=1000, help='Batch size for bulk creation')
        parser.add_argument('--days_back', type=int, default=90, help='Days back for data distribution')
        parser.add_argument('--password', type=str, default='demo-pass-123')

    def handle(self, *args, **options):
        days_back = options['days_back']
        self.password = options['password']

        self.stdout.write(self.style.SUCCESS('Seeding demo data'))

        self.ensure_admin()
        advertisers = [self.ensure_advertiser(i) for i in range(options['advertisers'])]
        partners = [self.ensure_partner(i) for i in range(options['partners'])]
        devices = [device for partner in partners for device in self.ensure_devices(partner)]
        creatives = [creative for advertiser in advertisers for creative in self.ensure_campaigns(advertiser)]

        created = self.create_deliveries(creatives, devices, options['deliveries'], options['batch_size'], days_back)
        self.create_transactions(advertisers, partners, days_back)
        self.create_emotion_samples(creatives, devices, days_back)
        self.create_ab_tests(creatives)

        self.show_stats(created)

    def ensure_user(self, email, name, role):
        user, created = User.objects.get_or_create(
            email=email,
            defaults={'username': email, 'name': name, 'role': role},
        )
        if created:
            user.set_password(self.password)
            user.save(update_fields=['password'])
            self.stdout.write(f'Created {role.lower()} {email}')
        return user

    def ensure_admin(self):
        user = self.ensure_user('admin@demo.lumen-ads.com', 'Demo Admin', 'ADMIN')
        AdminProfile.objects.get_or_create(user=user, defaults={'permissions': ['ALL']})
        return user

    def ensure_advertiser(self, index):
        user = self.ensure_user(f'advertiser{index + 1}@demo.lumen-ads.com', f'Advertiser {index + 1}', 'ADVERTISER')
        advertiser, _ = Advertiser.objects.get_or_create(
            user=user,
            defaults={'company_name': f'Demo Brand {index + 1}', 'contact_person': user.name},
        )
        PaymentMethod.objects.get_or_create(
            advertiser=advertiser, type='VISA',
            defaults={'last4': f'{4242 + index}'[-4:], 'exp_month': 12, 'exp_year': 2030, 'is_default': True},
        )
        return advertiser

    def ensure_partner(self, index):
        user = self.ensure_user(f'partner{index + 1}@demo.lumen-ads.com', f'Partner {index + 1}', 'PARTNER')
        partner, _ = Partner.objects.get_or_create(
            user=user,
            defaults={
                'company_name': f'Demo Venue {index + 1}',
                'contact_person': user.name,
                'status': 'ACTIVE',
                'verification_status': 'VERIFIED',
            },
        )
        wallet, _ = Wallet.objects.get_or_create(partner=partner, defaults={'balance': Decimal('250.00')})
        PaymentMethod.objects.get_or_create(wallet=wallet, type='BANK_TRANSFER', defaults={'is_default': True})
        return partner

    def ensure_devices(self, partner):
        devices = []
        for i in range(3):
            device, _ = Device.objects.get_or_create(
                device_identifier=f'DEMO-{partner.id}-{i + 1}',
                defaults={
                    'partner': partner,
                    'name': f'{partner.company_name} screen {i + 1}',
                    'status': 'ACTIVE',
                    'health_status': 'HEALTHY',
                    'last_active': timezone.now(),
                    'location': {'continent': random.choice(CONTINENTS)},
                },
            )
            devices.append(device)
        return devices

    def ensure_campaigns(self, advertiser):
        creatives = []
        for i in range(2):
            campaign, _ = Campaign.objects.get_or_create(
                advertiser=advertiser,
                name=f'{advertiser.company_name} campaign {i + 1}',
                defaults={
                    'budget': Decimal(random.randint(5000, 50000)),
                    'start_date': timezone.now() - timedelta(days=120),
                    'pricing_model': random.choice(['CPM', 'CPE', 'HYBRID']),
                    'status': 'ACTIVE',
                },
            )
            for creative_type in CREATIVE_TYPES:
                creative, _ = AdCreative.objects.get_or_create(
                    campaign=campaign,
                    name=f'{campaign.name} {creative_type.lower()}',
                    defaults={
                        'type': creative_type,
                        'headline': f'{advertiser.company_name} {creative_type.title()}',
                        'status': 'APPROVED',
                        'is_approved': True,
                    },
                )
                creatives.append(creative)
        self.stdout.write(f'Ensured campaigns for {advertiser.company_name}')
        return creatives

    def create_deliveries(self, creatives, devices, total_records, batch_size, days_back):
        if not creatives or not devices:
            return 0

        self.stdout.write(f'Creating {total_records:,} deliveries in batches of {batch_size:,}')
        base_time = timezone.now() - timedelta(days=days_back)
        total_created = 0

        for batch_start in range(0, total_records, batch_size):
            batch = []
            for _ in range(min(batch_size, total_records - batch_start)):
                creative = random.choice(creatives)
                impressions = random.randint(20, 400)
                engagements = random.randint(0, impressions // 5)
                scheduled = base_time + timedelta(days=random.randint(0, days_back), hours=random.randint(0, 23))
                batch.append(AdDelivery(
                    campaign_id=creative.campaign_id,
                    ad_creative=creative,
                    device=random.choice(devices),
                    scheduled_time=scheduled,
                    actual_delivery_time=scheduled,
                    viewer_count=random.randint(1, 60),
                    impressions=impressions,
                    engagements=engagements,
                    completions=random.randint(0, engagements),
                    status='DELIVERED',
                ))

            with transaction.atomic():
                AdDelivery.objects.bulk_create(batch)
            total_created += len(batch)
            self.stdout.write(f'Progress: {total_created / total_records * 100:.1f}% ({total_created:,}/{total_records:,})')

        return total_created

    def create_transactions(self, advertisers, partners, days_back):
        now = timezone.now()
        # current and comparison window
        span = days_back * 2
        rows = []
        for advertiser in advertisers:
            method = advertiser.payment_methods.first()
            for _ in range(random.randint(4, 10)):
                rows.append(Transaction(
                    type='DEPOSIT',
                    amount=Decimal(random.randint(100, 5000)),
                    status=random.choice(['COMPLETED', 'COMPLETED', 'COMPLETED', 'PENDING']),
                    description='Campaign deposit',
                    reference=f'adv:{advertiser.id}:campaign-deposit:region:{random.choice(CONTINENTS)}',
                    payment_method=method,
                    date=now - timedelta(days=random.randint(0, span)),
                ))
        for partner in partners:
            for _ in range(random.randint(2, 5)):
                rows.append(Transaction(
                    wallet=partner.wallet,
                    type='PAYMENT',
                    amount=Decimal(random.randint(20, 800)),
                    status='COMPLETED',
                    description='Partner commission',
                    reference=f'partner:{partner.id}:commission',
                    date=now - timedelta(days=random.randint(0, span)),
                ))
        Transaction.objects.bulk_create(rows)
        self.stdout.write(f'Created {len(rows)} transactions')

    def create_emotion_samples(self, creatives, devices, days_back):
        if not creatives or not devices:
            return
        now = timezone.now()
        samples = [
            EmotionData(
                ad_creative=random.choice(creatives),
                device=random.choice(devices),
                timestamp=now - timedelta(days=random.randint(0, min(days_back, 30))),
                joy_score=round(random.uniform(0.1, 0.9), 3),
                surprise_score=round(random.uniform(0.0, 0.6), 3),
                neutral_score=round(random.uniform(0.1, 0.7), 3),
                dwell_time=round(random.uniform(2, 25), 1),
                viewer_count=random.randint(1, 30),
            )
            for _ in range(300)
        ]
        EmotionData.objects.bulk_create(samples)
        self.stdout.write(f'Created {len(samples)} emotion samples')

    def create_ab_tests(self, creatives):
        by_campaign = {}
        for creative in creatives:
            by_campaign.setdefault(creative.campaign_id, []).append(creative)

        for campaign_id, campaign_creatives in list(by_campaign.items())[:3]:
            ab_test, created = ABTest.objects.get_or_create(
                campaign_id=campaign_id,
                name='Creative format test',
                defaults={'status': 'ACTIVE'},
            )
            if not created:
                continue
            share = Decimal('100') / len(campaign_creatives)
            for creative in campaign_creatives:
                impressions = random.randint(1000, 5000)
                ABTestVariant.objects.create(
                    ab_test=ab_test,
                    ad_creative=creative,
                    name=creative.type.title(),
                    traffic_allocation=share.quantize(Decimal('0.01')),
                    impressions=impressions,
                    engagements=random.randint(impressions // 50, impressions // 5),
                    conversions=random.randint(0, impressions // 50),
                )

    def show_stats(self, total_created):
        self.stdout.write(self.style.SUCCESS('\nFINAL STATISTICS:'))
        self.stdout.write(f'   Advertisers: {Advertiser.objects.count()}')
        self.stdout.write(f'   Partners: {Partner.objects.count()}')
        self.stdout.write(f'   Devices: {Device.objects.count()}')
        self.stdout.write(f'   Campaigns: {Campaign.objects.count()}')
        self.stdout.write(f'   Deliveries created: {total_created:,}')
        self.stdout.write(f'   Transactions: {Transaction.objects.count():,}')
        self.stdout.write(self.style.SUCCESS(f'\nLog in as admin@demo.lumen-ads.com / {self.password}'))
