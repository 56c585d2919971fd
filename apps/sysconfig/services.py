import copy
import logging

from django.db import transaction
from django.utils import timezone

from core.cache import delete_cache, delete_cache_pattern
from .encryption import EncryptionError, decrypt, encrypt
from .models import ConfigAuditLog, SystemConfig

logger = logging.getLogger(__name__)

CACHE_TTL = 3600
CONFIG_CACHE_KEY_PREFIX = 'system_config:'
ALL_CONFIGS_CACHE_KEY = 'system_config:all'
PUBLIC_SETTINGS_CACHE_KEY = 'public_system_settings'

SECRET_PATHS = [
    ('apiKey',),
    ('api_key',),
    ('webhookSecret',),
    ('webhook_secret',),
    ('emailConfig', 'smtpPassword'),
    ('emailConfig', 'smtp_password'),
    ('smsConfig', 'apiKey'),
    ('smsConfig', 'api_key'),
]
BULK_SECRET_PATHS = [('apiKey',), ('webhookSecret',)]

MASK_CHARS = ('●', '•')
SECRET_MASK = '•' * 24

VALID_PAYMENT_TERMS = ['net7', 'net15', 'net30', 'net45', 'net60']

SENSITIVE_AUDIT_KEYS = {'apiKey', 'webhookSecret', 'password', 'secret', 'token'}


class ConfigValidationError(Exception):
    pass


def config_cache_key(config_key, environment=None):
    return f"{CONFIG_CACHE_KEY_PREFIX}{config_key}:{environment or 'default'}"


def all_configs_cache_key(environment=None):
    return f"{ALL_CONFIGS_CACHE_KEY}:{environment or 'default'}"


def _secret_slots(value, paths):
    """Yield ``(container, field)`` for each secret path holding a truthy value."""
    if not isinstance(value, dict):
        return
    for path in paths:
        container = value
        for part in path[:-1]:
            container = container.get(part)
            if not isinstance(container, dict):
                break
        else:
            if container.get(path[-1]):
                yield container, path[-1]


def is_masked(value):
    return isinstance(value, str) and any(char in value for char in MASK_CHARS)


def decrypt_config_value(value):
    """Decrypt every secret field of a config value; mask all of them if any fails."""
    value = copy.deepcopy(value)
    slots = list(_secret_slots(value, SECRET_PATHS))
    try:
        for container, field in slots:
            container[field] = decrypt(container[field])
    except (EncryptionError, TypeError, AttributeError) as e:
        logger.error(f"Decryption error: {e}")
        for container, field in slots:
            container[field] = SECRET_MASK
    return value


def encrypt_secret_fields(value, paths=SECRET_PATHS):
    value = copy.deepcopy(value)
    for container, field in _secret_slots(value, paths):
        secret = container[field]
        if isinstance(secret, str) and not is_masked(secret):
            container[field] = encrypt(secret)
    return value


def should_encrypt_section(config_key, value):
    if 'security' in config_key or 'payment' in config_key:
        return True
    if 'notification' in config_key:
        email_config = value.get('emailConfig') or {}
        sms_config = value.get('smsConfig') or {}
        return bool(
            (isinstance(email_config, dict) and (email_config.get('smtpPassword') or email_config.get('smtp_password')))
            or (isinstance(sms_config, dict) and (sms_config.get('apiKey') or sms_config.get('api_key')))
        )
    return False


def validate_section(config_key, value):
    if config_key == 'paymentGateway' and value.get('paymentTerms'):
        if value['paymentTerms'] not in VALID_PAYMENT_TERMS:
            raise ConfigValidationError(
                'Invalid payment terms. Must be one of: ' + ', '.join(VALID_PAYMENT_TERMS)
            )


def serialize_config(config, value=None):
    return {
        'id': config.id,
        'configKey': config.config_key,
        'configValue': config.config_value if value is None else value,
        'description': config.description,
        'lastUpdated': config.last_updated.isoformat() if config.last_updated else None,
        'updatedBy': config.updated_by_id,
        'isEncrypted': config.is_encrypted,
        'environment': config.environment,
        'version': config.version,
    }


def readable_value(config):
    return decrypt_config_value(config.config_value) if config.is_encrypted else config.config_value


def recent_audit_log(limit=10):
    logs = ConfigAuditLog.objects.select_related('changed_by')[:limit]
    return [
        {
            'id': log.id,
            'user': (log.changed_by.name or log.changed_by.email) if log.changed_by else 'Unknown',
            'action': f"Updated {log.config_key}",
            'timestamp': log.change_date.isoformat(),
            'reason': log.change_reason,
        }
        for log in logs
    ]


def redact_sensitive(value):
    if isinstance(value, dict):
        return {
            key: SECRET_MASK if key in SENSITIVE_AUDIT_KEYS else redact_sensitive(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact_sensitive(item) for item in value]
    return value


def save_config(config_key, value, user, *, description=None, environment=None, is_encrypted=False,
                audit_reason=None, audit_new_only=False, ip_address=None, user_agent=None):
    """Upsert a config row with ``version = previous + 1`` and record the change.

    ``audit_new_only`` skips the audit row when the config did not exist yet.
    Returns ``(config, created)``.
    """
    with transaction.atomic():
        existing = SystemConfig.objects.select_for_update().filter(config_key=config_key).first()
        previous_value = existing.config_value if existing else None

        if existing is None:
            config = SystemConfig.objects.create(
                config_key=config_key,
                config_value=value,
                description=description,
                updated_by=user,
                is_encrypted=is_encrypted,
                environment=environment,
                version=1,
            )
        else:
            config = existing
            config.config_value = value
            config.description = description or existing.description
            config.updated_by = user
            config.is_encrypted = is_encrypted
            config.environment = environment
            config.version = existing.version + 1
            config.save()

        if existing is not None or not audit_new_only:
            ConfigAuditLog.objects.create(
                config_key=config_key,
                previous_value=previous_value,
                new_value=value,
                changed_by=user,
                ip_address=ip_address,
                user_agent=user_agent,
                change_reason=audit_reason,
            )

    delete_cache(config_cache_key(config_key, environment))
    logger.info(f"Config {config_key} saved at version {config.version} by user {user.id}")
    return config, existing is None


def invalidate_config_caches():
    delete_cache_pattern(f"{ALL_CONFIGS_CACHE_KEY}:*")
    delete_cache(PUBLIC_SETTINGS_CACHE_KEY)


def now_iso():
    return timezone.now().isoformat()
