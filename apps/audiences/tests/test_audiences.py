from rest_framework import status
from rest_framework.test import APITestCase

from apps.audiences.models import AudienceSegment
from apps.authentication.tests.helpers import authenticate, create_admin, create_advertiser


class AudienceSegmentTests(APITestCase):
    def test_admin_creates_segment(self):
        admin = create_admin()
        authenticate(self.client, admin)
        response = self.client.post('/api/v1/admin/audiences/', {
            'name': 'Commuters',
            'type': 'BEHAVIORAL',
            'rules': {'timeOfDay': ['07:00-09:00'], 'locationType': 'transit'},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(AudienceSegment.objects.get().created_by, admin)

    def test_rules_must_be_object(self):
        authenticate(self.client, create_admin())
        response = self.client.post('/api/v1/admin/audiences/', {
            'name': 'Broken',
            'rules': ['not', 'an', 'object'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('rules', response.data['details'])

    def test_advertiser_sees_active_segments_only(self):
        AudienceSegment.objects.create(name='Students', rules={'age': '18-24'})
        AudienceSegment.objects.create(name='Archived', rules={}, is_active=False)
        authenticate(self.client, create_advertiser())

        response = self.client.get('/api/v1/advertiser/audiences/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['name'] for row in response.data], ['Students'])

        response = self.client.post('/api/v1/advertiser/audiences/', {'name': 'Mine', 'rules': {}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
