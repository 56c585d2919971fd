import base64

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from django.test import SimpleTestCase, override_settings

from apps.sysconfig.encryption import (
    EncryptionError,
    _legacy_key_and_iv,
    decrypt,
    encrypt,
    mask_sensitive_data,
)
from apps.sysconfig.services import decrypt_config_value, encrypt_secret_fields, SECRET_MASK


class EncryptionTests(SimpleTestCase):
    def test_encrypt_produces_iv_and_ciphertext(self):
        token = encrypt('sk_live_abc123')
        iv, ciphertext = token.split(':')
        self.assertEqual(len(base64.b64decode(iv)), 16)
        self.assertEqual(len(base64.b64decode(ciphertext)) % 16, 0)
        self.assertEqual(decrypt(token), 'sk_live_abc123')

    def test_random_iv(self):
        self.assertNotEqual(encrypt('same'), encrypt('same'))

    def test_wrong_key_fails(self):
        token = encrypt('secret value')
        with override_settings(ENCRYPTION_KEY='a-different-key'):
            with self.assertRaises(EncryptionError):
                decrypt(token)

    def test_malformed_input(self):
        with self.assertRaises(EncryptionError):
            decrypt('a:b:c')
        with self.assertRaises(EncryptionError):
            decrypt('not base64 at all')

    def test_legacy_format(self):
        key, iv = _legacy_key_and_iv('test-encryption-key-for-lumen-ads')
        padder = padding.PKCS7(128).padder()
        padded = padder.update(b'legacy-secret') + padder.finalize()
        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        legacy = base64.b64encode(encryptor.update(padded) + encryptor.finalize()).decode()

        self.assertEqual(decrypt(legacy), 'legacy-secret')

    def test_mask(self):
        self.assertEqual(mask_sensitive_data('sk_live_abcdef'), 'sk_l' + '•' * 10)
        self.assertEqual(mask_sensitive_data('abc'), 'abc')
        self.assertEqual(len(mask_sensitive_data('x' * 100)), 20)


class SecretFieldTests(SimpleTestCase):
    def test_round_trip_of_nested_secrets(self):
        section = {
            'provider': 'stripe',
            'apiKey': 'sk_live_123',
            'emailConfig': {'host': 'smtp.example.com', 'smtpPassword': 'hunter2'},
            'smsConfig': {'api_key': 'sms-key'},
        }
        encrypted = encrypt_secret_fields(section)
        self.assertEqual(encrypted['provider'], 'stripe')
        self.assertNotEqual(encrypted['apiKey'], 'sk_live_123')
        self.assertNotEqual(encrypted['emailConfig']['smtpPassword'], 'hunter2')
        self.assertNotEqual(encrypted['smsConfig']['api_key'], 'sms-key')
        # the input is not mutated
        self.assertEqual(section['apiKey'], 'sk_live_123')

        self.assertEqual(decrypt_config_value(encrypted), section)

    def test_masked_values_are_not_encrypted(self):
        section = {'apiKey': '●●●●●●●●', 'webhookSecret': ''}
        self.assertEqual(encrypt_secret_fields(section), section)

    def test_failed_decryption_masks_every_secret(self):
        value = {'apiKey': encrypt('good'), 'webhookSecret': 'garbage'}
        result = decrypt_config_value(value)
        self.assertEqual(result, {'apiKey': SECRET_MASK, 'webhookSecret': SECRET_MASK})
