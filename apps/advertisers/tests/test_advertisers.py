from decimal import Decimal

from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.authentication.tests.helpers import authenticate, create_admin, create_advertiser
from apps.campaigns.models import Campaign


class AdvertiserProfileTests(APITestCase):
    def setUp(self):
        self.user = create_advertiser()
        authenticate(self.client, self.user)

    def test_get_profile(self):
        response = self.client.get('/api/v1/advertiser/profile/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['company_name'], 'Acme Media')
        self.assertEqual(response.data['email'], 'advertiser@lumen.test')
        self.assertEqual(response.data['campaign_count'], 0)

    def test_update_profile(self):
        response = self.client.put('/api/v1/advertiser/profile/', {'city': 'Lisbon', 'country': 'Portugal'},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.advertiser.refresh_from_db()
        self.assertEqual(self.user.advertiser.city, 'Lisbon')


class AdvertiserAdminTests(APITestCase):
    def setUp(self):
        self.acme = create_advertiser().advertiser
        self.globex = create_advertiser(email='globex@lumen.test', company='Globex').advertiser
        Campaign.objects.create(advertiser=self.acme, name='One', budget=Decimal('10.00'), start_date=timezone.now())
        authenticate(self.client, create_admin())

    def test_search_by_company(self):
        response = self.client.get('/api/v1/admin/advertisers/?search=acme')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['campaign_count'], 1)

    def test_admin_cannot_create_advertiser_directly(self):
        response = self.client.post('/api/v1/admin/advertisers/', {'company_name': 'New'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)

    def test_partner_token_is_forbidden(self):
        from apps.authentication.tests.helpers import create_partner

        authenticate(self.client, create_partner())
        response = self.client.get('/api/v1/admin/advertisers/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json(), {'error': 'Forbidden'})
