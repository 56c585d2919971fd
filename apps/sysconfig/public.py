"""Public (unauthenticated) view of system settings.

Only a fixed set of config rows is exposed, each normalized to the fields
clients expect, and the payment gateway row is reduced to non-secret fields.
Every object carries both camelCase and snake_case spellings of its keys.
"""
import json
import logging
import re

from django.utils import timezone

from .models import SystemConfig

logger = logging.getLogger(__name__)

PUBLIC_CONFIG_KEYS = [
    'general_settings',
    'commission_rates',
    'sustainability_settings',
    'system_settings',
]

PAYMENT_GATEWAY_PUBLIC_FIELDS = [
    'provider',
    'supportedCurrencies',
    'paymentTerms',
    'billingCycle',
    'sendReminders',
    'reminderDays',
    'invoicePrefix',
    'taxRate',
    'payment_terms',
    'supported_currencies',
    'billing_cycle',
    'send_reminders',
    'reminder_days',
    'invoice_prefix',
    'tax_rate',
]

TOP_LEVEL_ALIASES = {
    'general_settings': 'generalSettings',
    'commission_rates': 'commissionRates',
    'sustainability_settings': 'sustainabilitySettings',
    'system_settings': 'systemSettings',
    'payment_gateway': 'paymentGateway',
}

_SNAKE_SEGMENT = re.compile(r'_([a-z])')
_CAMEL_BOUNDARY = re.compile(r'([a-z])([A-Z])')


def to_camel(key):
    return _SNAKE_SEGMENT.sub(lambda m: m.group(1).upper(), key)


def to_snake(key):
    return _CAMEL_BOUNDARY.sub(r'\1_\2', key).lower()


def ensure_naming_compatibility(obj):
    """Add the other naming variant of every key, recursively. Existing keys win."""
    if not isinstance(obj, dict):
        return obj

    result = dict(obj)
    for key, value in obj.items():
        if isinstance(value, dict):
            result[key] = ensure_naming_compatibility(value)

        if '_' in key:
            alias = to_camel(key)
        elif _CAMEL_BOUNDARY.search(key):
            alias = to_snake(key)
        else:
            continue
        if alias not in result:
            result[alias] = result[key]
    return result


def _first_set(value, *keys, default=None):
    """First key whose value is not None (``??`` chain)."""
    for key in keys:
        if value.get(key) is not None:
            return value[key]
    return default


def _first_truthy(value, *keys, default=None):
    """First key whose value is truthy (``||`` chain)."""
    for key in keys:
        if value.get(key):
            return value[key]
    return default


def with_expected_fields(config_key, value):
    if not value or not isinstance(value, dict):
        return value

    if config_key == 'general_settings':
        fields = {
            'platformName': _first_truthy(value, 'platformName', 'platform_name', default=''),
            'platformUrl': _first_truthy(value, 'platformUrl', 'platform_url', default=''),
            'supportEmail': _first_truthy(value, 'supportEmail', 'support_email', default=''),
            'defaultTimezone': _first_truthy(value, 'defaultTimezone', 'timezone', default='UTC'),
            'defaultLanguage': _first_truthy(value, 'defaultLanguage', 'language', default='en'),
            'defaultCurrency': _first_truthy(value, 'defaultCurrency', 'currency', default='USD'),
            'dateFormat': _first_truthy(value, 'dateFormat', 'date_format', default='YYYY-MM-DD'),
            'timeFormat': _first_truthy(value, 'timeFormat', 'time_format', default='24h'),
            'darkModeDefault': _first_set(value, 'darkModeDefault', 'dark_mode_default', default=False),
            'interfaceAnimations': _first_set(value, 'interfaceAnimations', 'interface_animations', default=True),
            'interfaceDensity': _first_set(value, 'interfaceDensity', 'interface_density', default='normal'),
        }
    elif config_key == 'commission_rates':
        fields = {
            'standardRate': _first_set(value, 'standardRate', 'standard_rate', 'default', default=0),
            'premiumRate': _first_set(value, 'premiumRate', 'premium_rate', 'premium', default=0),
            'enterpriseRate': _first_set(value, 'enterpriseRate', 'enterprise', default=0),
            'minimumPayout': _first_set(value, 'minimumPayout', 'minimum_payout', default=0),
            'currency': _first_truthy(value, 'currency', default='USD'),
            'performanceBonuses': _first_truthy(value, 'performanceBonuses', default={
                'enabled': False,
                'engagementBonus': 0,
                'retentionBonus': 0,
            }),
            'payoutSchedule': _first_truthy(value, 'payoutSchedule', default={
                'frequency': 'monthly',
                'payoutDay': '15',
                'automaticPayouts': True,
            }),
        }
    elif config_key == 'sustainability_settings':
        fields = {
            'carbonTrackingEnabled': _first_set(value, 'carbonTrackingEnabled', default=False),
            'reportingFrequency': _first_truthy(value, 'reportingFrequency', default='monthly'),
            'energyOptimizationEnabled': _first_set(value, 'energyOptimizationEnabled', default=False),
            'offsetProgram': _first_truthy(value, 'offsetProgram', default='none'),
            'offsetPercentage': _first_set(value, 'offsetPercentage', default=0),
            'ecoFriendlyDiscounts': _first_set(value, 'ecoFriendlyDiscounts', default=False),
            'ecoDiscountPercentage': _first_set(value, 'ecoDiscountPercentage', default=0),
            'partnerEnergyBonuses': _first_set(value, 'partnerEnergyBonuses', default=False),
        }
    elif config_key == 'system_settings':
        fields = {
            'maintenanceMode': _first_set(value, 'maintenanceMode', default=False),
            'automaticBackups': _first_set(value, 'automaticBackups', 'autoBackup', default=False),
            'backupFrequency': _first_truthy(value, 'backupFrequency', default='daily'),
            'logLevel': _first_truthy(value, 'logLevel', default='error'),
            'debugMode': _first_set(value, 'debugMode', default=False),
            'featureFlags': _first_truthy(value, 'featureFlags', default={
                'arVrFeatures': False,
                'voiceInteraction': False,
                'blockchainVerification': False,
                'betaFeatures': False,
            }),
        }
    else:
        return value

    return ensure_naming_compatibility(fields)


def sanitize_payment_gateway(value):
    if not value:
        return None
    return {field: value[field] for field in PAYMENT_GATEWAY_PUBLIC_FIELDS if field in value}


def _parse(value):
    if isinstance(value, str):
        return json.loads(value)
    return value


def build_public_settings(now=None):
    now = now or timezone.now()
    settings_map = {}

    for config in SystemConfig.objects.filter(config_key__in=PUBLIC_CONFIG_KEYS):
        try:
            settings_map[config.config_key] = with_expected_fields(config.config_key, _parse(config.config_value))
        except (ValueError, TypeError) as e:
            logger.error(f"Error processing config {config.config_key}: {e}")

    gateway = SystemConfig.objects.filter(config_key='payment_gateway').first()
    if gateway is not None:
        try:
            sanitized = sanitize_payment_gateway(_parse(gateway.config_value))
            settings_map['payment_gateway'] = ensure_naming_compatibility(sanitized)
        except (ValueError, TypeError) as e:
            logger.error(f"Error processing payment gateway config: {e}")

    result = dict(settings_map)
    for key, alias in TOP_LEVEL_ALIASES.items():
        if settings_map.get(key):
            result[alias] = settings_map[key]

    stamp = now.isoformat()
    result['_meta'] = {'lastUpdated': stamp, 'version': '1.0'}
    result['last_updated'] = stamp
    return result
