from django.core.cache import cache
from rest_framework import status
from rest_framework.test import APITestCase

from apps.authentication.tests.helpers import authenticate, create_admin
from apps.sysconfig.encryption import decrypt
from apps.sysconfig.models import ConfigAuditLog, SystemConfig
from apps.sysconfig.services import SECRET_MASK, save_config


class SystemSettingsTests(APITestCase):
    def setUp(self):
        cache.clear()
        self.admin = create_admin()
        authenticate(self.client, self.admin)

    def test_post_encrypts_secrets_and_versions(self):
        response = self.client.post('/api/v1/admin/settings/', {
            'paymentGateway': {'provider': 'stripe', 'apiKey': 'sk_live_123', 'paymentTerms': 'net30'},
            'general_settings': {'platformName': 'Lumen'},
            'environment': 'production',
            'changeReason': 'Initial setup',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({row['status'] for row in response.data['results']}, {'created'})
        self.assertEqual(response.data['settings']['paymentGateway']['apiKey'], 'sk_live_123')

        gateway = SystemConfig.objects.get(config_key='paymentGateway')
        self.assertTrue(gateway.is_encrypted)
        self.assertEqual(gateway.version, 1)
        self.assertEqual(gateway.environment, 'production')
        self.assertNotEqual(gateway.config_value['apiKey'], 'sk_live_123')
        self.assertEqual(decrypt(gateway.config_value['apiKey']), 'sk_live_123')
        self.assertFalse(SystemConfig.objects.get(config_key='general_settings').is_encrypted)

        self.assertEqual(ConfigAuditLog.objects.count(), 2)
        self.assertEqual(ConfigAuditLog.objects.first().change_reason, 'Initial setup')

        response = self.client.post('/api/v1/admin/settings/', {
            'paymentGateway': {'provider': 'stripe', 'apiKey': 'sk_live_456'},
        }, format='json')
        self.assertEqual(response.data['results'][0]['status'], 'updated')
        gateway.refresh_from_db()
        self.assertEqual(gateway.version, 2)

    def test_invalid_payment_terms_reported_per_section(self):
        response = self.client.post('/api/v1/admin/settings/', {
            'paymentGateway': {'paymentTerms': 'net90'},
            'system_settings': {'maintenanceMode': False},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['errors'][0]['sectionKey'], 'paymentGateway')
        self.assertIn('net7, net15, net30, net45, net60', response.data['errors'][0]['error'])
        self.assertFalse(SystemConfig.objects.filter(config_key='paymentGateway').exists())
        self.assertTrue(SystemConfig.objects.filter(config_key='system_settings').exists())

    def test_masked_secret_is_kept_as_is(self):
        self.client.post('/api/v1/admin/settings/', {
            'security_settings': {'apiKey': '●●●●●●●●'},
        }, format='json')
        config = SystemConfig.objects.get(config_key='security_settings')
        self.assertEqual(config.config_value['apiKey'], '●●●●●●●●')

        response = self.client.get('/api/v1/admin/settings/', {'configKey': 'security_settings'})
        self.assertEqual(response.data['configValue']['apiKey'], SECRET_MASK)

    def test_get_all_and_single(self):
        save_config('general_settings', {'platformName': 'Lumen'}, self.admin)

        response = self.client.get('/api/v1/admin/settings/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['settings'], {'general_settings': {'platformName': 'Lumen'}})
        self.assertEqual(response.data['auditLog'][0]['action'], 'Updated general_settings')

        response = self.client.get('/api/v1/admin/settings/', {'configKey': 'general_settings'})
        self.assertEqual(response.data['configKey'], 'general_settings')
        self.assertEqual(response.data['version'], 1)

        response = self.client.get('/api/v1/admin/settings/', {'configKey': 'missing'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_get_is_cached_until_a_write(self):
        save_config('general_settings', {'platformName': 'Lumen'}, self.admin)
        self.client.get('/api/v1/admin/settings/')

        SystemConfig.objects.filter(config_key='general_settings').update(config_value={'platformName': 'Stale'})
        response = self.client.get('/api/v1/admin/settings/')
        self.assertEqual(response.data['settings']['general_settings']['platformName'], 'Lumen')

        response = self.client.get('/api/v1/admin/settings/', {'skipCache': 'true'})
        self.assertEqual(response.data['settings']['general_settings']['platformName'], 'Stale')

    def test_bulk_put_audits_updates_only(self):
        save_config('commission_rates', {'standardRate': 10}, self.admin)
        audit_count = ConfigAuditLog.objects.count()

        response = self.client.put('/api/v1/admin/settings/', {
            'commission_rates': {'value': {'standardRate': 12}, 'description': 'Raise rate'},
            'new_key': {'value': {'enabled': True}},
            'broken': None,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['errors'], [{'configKey': 'broken', 'error': 'Invalid configuration data'}])

        self.assertEqual(SystemConfig.objects.get(config_key='commission_rates').version, 2)
        self.assertEqual(SystemConfig.objects.get(config_key='new_key').version, 1)
        self.assertEqual(ConfigAuditLog.objects.count(), audit_count + 1)

    def test_bulk_put_rejects_empty_body(self):
        response = self.client.put('/api/v1/admin/settings/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_requires_settings_permission(self):
        authenticate(self.client, create_admin(email='viewer@lumen.test', permissions=['analytics']))
        response = self.client.get('/api/v1/admin/settings/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class SettingsAuditTests(APITestCase):
    def setUp(self):
        self.admin = create_admin()
        authenticate(self.client, self.admin)
        save_config('payment_gateway', {'apiKey': 'first', 'provider': 'stripe'}, self.admin, audit_reason='one')
        save_config('payment_gateway', {'apiKey': 'second', 'provider': 'stripe'}, self.admin, audit_reason='two')
        save_config('general_settings', {'platformName': 'Lumen'}, self.admin)

    def test_audit_rows_redact_secrets(self):
        response = self.client.get('/api/v1/admin/settings/audit/', {'configKey': 'payment_gateway'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pagination']['total'], 2)

        latest = response.data['logs'][0]
        self.assertEqual(latest['changeReason'], 'two')
        self.assertEqual(latest['newValue'], {'apiKey': SECRET_MASK, 'provider': 'stripe'})
        self.assertEqual(latest['previousValue']['apiKey'], SECRET_MASK)
        self.assertEqual(latest['user']['email'], self.admin.email)

    def test_pagination(self):
        response = self.client.get('/api/v1/admin/settings/audit/', {'limit': 2, 'offset': 0})
        self.assertEqual(len(response.data['logs']), 2)
        self.assertTrue(response.data['pagination']['hasMore'])

        response = self.client.get('/api/v1/admin/settings/audit/', {'limit': 2, 'offset': 2})
        self.assertFalse(response.data['pagination']['hasMore'])

    def test_bad_parameters(self):
        response = self.client.get('/api/v1/admin/settings/audit/', {'limit': 'ten'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/admin/settings/audit/', {'startDate': 'last week'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
