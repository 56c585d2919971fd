from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from apps.authentication.tests.helpers import authenticate, create_admin, create_advertiser, create_partner
from apps.sysconfig.flags import is_feature_enabled, rollout_hash, rollout_percentile
from apps.sysconfig.models import FeatureFlag


class RolloutHashTests(TestCase):
    def test_matches_java_string_hash(self):
        self.assertEqual(rollout_hash(''), 0)
        self.assertEqual(rollout_hash('a'), 97)
        self.assertEqual(rollout_hash('hello'), 99162322)
        self.assertEqual(rollout_hash('Aa'), rollout_hash('BB'))

    def test_wraps_to_signed_32_bit(self):
        self.assertEqual(rollout_hash('polygenelubricants'), -2147483648)
        self.assertEqual(rollout_percentile('polygenelubricants'), 48)

    def test_utf16_code_units(self):
        # astral characters count as two surrogate code units
        self.assertEqual(rollout_hash('\U0001F600'), 0xD83D * 31 + 0xDE00)


class FeatureFlagTests(TestCase):
    def setUp(self):
        self.advertiser = create_advertiser()
        self.partner = create_partner()

    def test_missing_or_disabled(self):
        self.assertFalse(is_feature_enabled('nope'))
        FeatureFlag.objects.create(name='beta', enabled=False)
        self.assertFalse(is_feature_enabled('beta', user=self.advertiser))

    def test_enabled_without_rules(self):
        FeatureFlag.objects.create(name='beta', enabled=True)
        self.assertTrue(is_feature_enabled('beta'))

    def test_percentage_bounds(self):
        FeatureFlag.objects.create(name='none', enabled=True, percentage=0)
        FeatureFlag.objects.create(name='all', enabled=True, percentage=100)
        self.assertFalse(is_feature_enabled('none', user=self.advertiser))
        self.assertTrue(is_feature_enabled('all', user=self.advertiser))

    def test_percentage_uses_user_bucket(self):
        FeatureFlag.objects.create(name='gradual', enabled=True, percentage=50)
        expected = rollout_percentile(f"gradual-{self.advertiser.id}") < 50
        self.assertEqual(is_feature_enabled('gradual', user=self.advertiser), expected)

    def test_role_condition(self):
        FeatureFlag.objects.create(name='ads-only', enabled=True, conditions={'userRole': 'ADVERTISER'})
        self.assertTrue(is_feature_enabled('ads-only', user=self.advertiser))
        self.assertFalse(is_feature_enabled('ads-only', user=self.partner))
        # anonymous callers are not held to the role condition
        self.assertTrue(is_feature_enabled('ads-only'))


class FeatureFlagEndpointTests(APITestCase):
    def test_admin_crud_and_public_check(self):
        authenticate(self.client, create_admin())
        response = self.client.post('/api/v1/admin/feature-flags/', {
            'name': 'new-dashboard',
            'enabled': True,
            'percentage': 100,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.post('/api/v1/admin/feature-flags/', {'name': 'bad', 'percentage': 150}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch('/api/v1/admin/feature-flags/new-dashboard/', {'enabled': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.credentials()
        response = self.client.get('/api/v1/features/check/', {'name': 'new-dashboard'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'enabled': False})

        response = self.client.get('/api/v1/features/check/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
