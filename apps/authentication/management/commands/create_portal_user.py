from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model
from django.db import transaction
from apps.authentication.models import AdminProfile

User = get_user_model()


class Command(BaseCommand):
    help = 'Create a portal user (admin, advertiser or partner) with its profile'

    def add_arguments(self, parser):
        parser.add_argument('--email', type=str, required=True)
        parser.add_argument('--password', type=str, required=True)
        parser.add_argument('--name', type=str, default='')
        parser.add_argument('--role', type=str, default='ADVERTISER',
                            choices=['ADMIN', 'ADVERTISER', 'PARTNER'])
        parser.add_argument('--permissions', type=str, default='ALL',
                            help='Comma separated admin permissions')

    def handle(self, *args, **options):
        from apps.advertisers.models import Advertiser
        from apps.partners.models import Partner

        email = options['email']
        role = options['role']
        name = options['name'] or email.split('@')[0]

        if User.objects.filter(email=email).exists():
            self.stdout.write(
                self.style.ERROR(f'User with email {email} already exists')
            )
            return

        with transaction.atomic():
            user = User.objects.create_user(
                username=email,
                email=email,
                password=options['password'],
                name=name,
                role=role,
            )

            if role == 'ADMIN':
                permissions = [p.strip() for p in options['permissions'].split(',') if p.strip()]
                AdminProfile.objects.create(user=user, permissions=permissions)
                user.is_staff = True
                user.save(update_fields=['is_staff'])
            elif role == 'ADVERTISER':
                Advertiser.objects.create(user=user, company_name=f"{name}'s Company", contact_person=name)
            else:
                Partner.objects.create(user=user, company_name=f"{name}'s Venue", contact_person=name)

        self.stdout.write(
            self.style.SUCCESS(f'Successfully created {role} user {email}')
        )
