from rest_framework_simplejwt.tokens import RefreshToken

from apps.advertisers.models import Advertiser
from apps.authentication.models import AdminProfile, User
from apps.partners.models import Partner


def create_admin(email='admin@lumen.test', permissions=None):
    user = User.objects.create_user(username=email, email=email, password='testpass123', name='Admin', role='ADMIN')
    AdminProfile.objects.create(user=user, permissions=['ALL'] if permissions is None else permissions)
    return user


def create_advertiser(email='advertiser@lumen.test', company='Acme Media'):
    user = User.objects.create_user(username=email, email=email, password='testpass123',
                                    name='Ada Advertiser', role='ADVERTISER')
    Advertiser.objects.create(user=user, company_name=company, contact_person='Ada')
    return user


def create_partner(email='partner@lumen.test', company='Corner Cafe'):
    user = User.objects.create_user(username=email, email=email, password='testpass123',
                                    name='Pat Partner', role='PARTNER')
    Partner.objects.create(user=user, company_name=company, contact_person='Pat', status='ACTIVE')
    return user


def authenticate(client, user):
    token = RefreshToken.for_user(user).access_token
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
