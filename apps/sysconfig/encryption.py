"""Symmetric encryption for secrets stored inside config rows.

Current format is ``base64(iv):base64(ciphertext)`` using AES-256-CBC with a
key derived by scrypt from ``settings.ENCRYPTION_KEY``. Values without a
``:`` were written by the legacy password-based scheme (OpenSSL
``EVP_BytesToKey`` with MD5 and no salt) and can still be decrypted.
"""
import base64
import hashlib
import logging
import os
from functools import lru_cache

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from django.conf import settings

logger = logging.getLogger(__name__)

IV_LENGTH = 16
KEY_LENGTH = 32
MASK_CHAR = '•'


class EncryptionError(Exception):
    pass


@lru_cache(maxsize=8)
def _derive_key(secret):
    kdf = Scrypt(salt=b'salt', length=KEY_LENGTH, n=2 ** 14, r=8, p=1)
    return kdf.derive(secret.encode('utf-8'))


def _legacy_key_and_iv(secret):
    """OpenSSL EVP_BytesToKey(MD5, no salt, one round) for a 32-byte key and 16-byte IV."""
    password = secret.encode('utf-8')
    derived = b''
    block = b''
    while len(derived) < KEY_LENGTH + IV_LENGTH:
        block = hashlib.md5(block + password).digest()
        derived += block
    return derived[:KEY_LENGTH], derived[KEY_LENGTH:KEY_LENGTH + IV_LENGTH]


def _decrypt_cbc(key, iv, ciphertext):
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(128).unpadder()
    return (unpadder.update(padded) + unpadder.finalize()).decode('utf-8')


def encrypt(text):
    try:
        iv = os.urandom(IV_LENGTH)
        padder = padding.PKCS7(128).padder()
        padded = padder.update(text.encode('utf-8')) + padder.finalize()
        encryptor = Cipher(algorithms.AES(_derive_key(settings.ENCRYPTION_KEY)), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
    except (TypeError, ValueError, AttributeError) as e:
        logger.error(f"Encryption error: {e}")
        raise EncryptionError('Failed to encrypt data') from e
    return f"{base64.b64encode(iv).decode()}:{base64.b64encode(ciphertext).decode()}"


def decrypt(encrypted_text):
    if ':' not in encrypted_text:
        return _decrypt_legacy(encrypted_text)

    parts = encrypted_text.split(':')
    if len(parts) != 2:
        raise EncryptionError('Invalid encrypted text format')

    try:
        iv = base64.b64decode(parts[0])
        ciphertext = base64.b64decode(parts[1])
        return _decrypt_cbc(_derive_key(settings.ENCRYPTION_KEY), iv, ciphertext)
    except (TypeError, ValueError) as e:
        logger.error(f"Decryption error: {e}")
        raise EncryptionError('Failed to decrypt data') from e


def _decrypt_legacy(encrypted_text):
    try:
        key, iv = _legacy_key_and_iv(settings.ENCRYPTION_KEY)
        return _decrypt_cbc(key, iv, base64.b64decode(encrypted_text))
    except (TypeError, ValueError) as e:
        logger.error(f"Legacy decryption error: {e}")
        raise EncryptionError('Failed to decrypt legacy data') from e


def mask_sensitive_data(text, visible_chars=4):
    if not text or len(text) <= visible_chars:
        return text
    return text[:visible_chars] + MASK_CHAR * min(len(text) - visible_chars, 16)
