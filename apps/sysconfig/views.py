import logging
from datetime import datetime, time

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from rest_framework import viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.authentication.permissions import HasAdminPermission, IsAdmin
from core.cache import get_cache, set_cache
from core.utils import get_client_ip, get_user_agent
from .flags import is_feature_enabled
from .models import ConfigAuditLog, FeatureFlag, SystemConfig
from .public import build_public_settings
from .serializers import FeatureFlagSerializer
from .services import (
    BULK_SECRET_PATHS,
    CACHE_TTL,
    PUBLIC_SETTINGS_CACHE_KEY,
    ConfigValidationError,
    all_configs_cache_key,
    config_cache_key,
    encrypt_secret_fields,
    invalidate_config_caches,
    now_iso,
    readable_value,
    recent_audit_log,
    redact_sensitive,
    save_config,
    serialize_config,
    should_encrypt_section,
    validate_section,
)

logger = logging.getLogger(__name__)


class SystemSettingsView(APIView):
    permission_classes = [IsAdmin, HasAdminPermission]
    required_permission = 'settings'

    def get(self, request):
        config_key = request.query_params.get('configKey')
        environment = request.query_params.get('environment') or None
        skip_cache = request.query_params.get('skipCache') == 'true'
        cache_key = config_cache_key(config_key, environment) if config_key else all_configs_cache_key(environment)

        if not skip_cache:
            cached = get_cache(cache_key)
            if cached:
                return Response(cached)

        try:
            if config_key:
                config = SystemConfig.objects.filter(config_key=config_key).first()
                if config is None:
                    return Response({'error': 'Configuration not found'}, status=404)
                result = serialize_config(config, readable_value(config))
            else:
                configs = SystemConfig.objects.all()
                if environment:
                    configs = configs.filter(environment=environment)
                configs = list(configs)
                last_saved = max((c.last_updated for c in configs), default=None)
                result = {
                    'settings': {config.config_key: readable_value(config) for config in configs},
                    'auditLog': recent_audit_log(),
                    'lastSaved': last_saved.isoformat() if last_saved else None,
                }
        except Exception as e:
            logger.error(f"Error fetching system settings: {e}")
            return Response({'error': 'Internal server error'}, status=500)

        set_cache(cache_key, result, CACHE_TTL)
        return Response(result)

    def post(self, request):
        """Save each object-valued section of the body as its own config row."""
        data = request.data
        if not isinstance(data, dict):
            return Response({'error': 'Invalid settings data'}, status=400)

        timestamp = now_iso()
        environment = data.get('environment') or None
        reason = data.get('changeReason') or 'Updated from admin panel'
        ip_address = get_client_ip(request)
        user_agent = get_user_agent(request)
        results = []
        errors = []

        for section_key, section in data.items():
            if not isinstance(section, dict):
                continue
            try:
                validate_section(section_key, section)
                encrypted = should_encrypt_section(section_key, section)
                value = encrypt_secret_fields(section) if encrypted else section
                config, created = save_config(
                    section_key,
                    value,
                    request.user,
                    description=f"{section_key.replace('_', ' ')} configuration",
                    environment=environment,
                    is_encrypted=encrypted,
                    audit_reason=reason,
                    ip_address=ip_address,
                    user_agent=user_agent,
                )
            except ConfigValidationError as e:
                errors.append({'sectionKey': section_key, 'error': str(e)})
                continue
            except Exception as e:
                logger.error(f"Error processing config {section_key}: {e}")
                errors.append({'sectionKey': section_key, 'error': 'Processing error'})
                continue

            results.append({
                'configKey': section_key,
                'id': config.id,
                'version': config.version,
                'status': 'created' if created else 'updated',
                'timestamp': timestamp,
            })

        invalidate_config_caches()

        saved = SystemConfig.objects.filter(config_key__in=[row['configKey'] for row in results])
        response = {
            'success': True,
            'message': 'Settings saved successfully',
            'results': results,
            'settings': {config.config_key: readable_value(config) for config in saved},
            'lastSaved': timestamp,
            'auditLog': recent_audit_log(),
        }
        if errors:
            response['errors'] = errors
        return Response(response)

    def put(self, request):
        """Bulk update: ``{key: {value, description, environment, isEncrypted}}``."""
        data = request.data
        if not isinstance(data, dict) or not data:
            return Response({'error': 'Invalid or empty settings data'}, status=400)

        ip_address = get_client_ip(request)
        user_agent = get_user_agent(request)
        results = []
        errors = []

        for config_key, entry in data.items():
            if not entry or not isinstance(entry, dict):
                errors.append({'configKey': config_key, 'error': 'Invalid configuration data'})
                continue
            try:
                existing = SystemConfig.objects.filter(config_key=config_key).first()
                value = entry.get('value')
                is_encrypted = entry.get('isEncrypted')
                if is_encrypted is None:
                    is_encrypted = existing.is_encrypted if existing else False
                if is_encrypted or (existing and existing.is_encrypted):
                    value = encrypt_secret_fields(value if isinstance(value, dict) else {}, BULK_SECRET_PATHS)

                config, created = save_config(
                    config_key,
                    value,
                    request.user,
                    description=entry.get('description'),
                    environment=entry.get('environment'),
                    is_encrypted=bool(is_encrypted),
                    audit_reason=entry.get('description') or 'Bulk update',
                    audit_new_only=True,
                    ip_address=ip_address,
                    user_agent=user_agent,
                )
            except Exception as e:
                logger.error(f"Error processing config {config_key}: {e}")
                errors.append({'configKey': config_key, 'error': 'Processing error'})
                continue

            results.append({
                'configKey': config_key,
                'id': config.id,
                'version': config.version,
                'status': 'created' if created else 'updated',
            })

        invalidate_config_caches()

        response = {'success': len(results) > 0, 'results': results}
        if errors:
            response['errors'] = errors
        return Response(response)


def _parse_moment(value, end_of_day=False):
    try:
        day = parse_date(value)
        if day is not None:
            moment = datetime.combine(day, time.max if end_of_day else time.min)
        else:
            moment = parse_datetime(value)
    except ValueError:
        return None
    if moment is None:
        return None
    if timezone.is_naive(moment):
        moment = timezone.make_aware(moment)
    return moment


def _audit_user(user):
    if user is None:
        return None
    return {'id': user.id, 'name': user.name, 'email': user.email, 'image': user.image}


class SettingsAuditView(APIView):
    permission_classes = [IsAdmin, HasAdminPermission]
    required_permission = 'settings'

    def get(self, request):
        params = request.query_params
        try:
            limit = int(params.get('limit') or 20)
            offset = int(params.get('offset') or 0)
        except ValueError:
            return Response({'error': 'limit and offset must be integers'}, status=400)

        logs = ConfigAuditLog.objects.select_related('changed_by')
        if params.get('configKey'):
            logs = logs.filter(config_key=params['configKey'])
        if params.get('changedBy'):
            logs = logs.filter(changed_by_id=params['changedBy'])
        for param, lookup in (('startDate', 'change_date__gte'), ('endDate', 'change_date__lte')):
            if params.get(param):
                moment = _parse_moment(params[param], end_of_day=(param == 'endDate'))
                if moment is None:
                    return Response({'error': f"Invalid {param}"}, status=400)
                logs = logs.filter(**{lookup: moment})

        total = logs.count()
        page = list(logs[offset:offset + limit])
        rows = [
            {
                'id': log.id,
                'configKey': log.config_key,
                'previousValue': redact_sensitive(log.previous_value),
                'newValue': redact_sensitive(log.new_value),
                'changedBy': log.changed_by_id,
                'changeDate': log.change_date,
                'ipAddress': log.ip_address,
                'changeReason': log.change_reason,
                'user': _audit_user(log.changed_by),
            }
            for log in page
        ]

        return Response({
            'logs': rows,
            'pagination': {
                'total': total,
                'limit': limit,
                'offset': offset,
                'hasMore': offset + len(page) < total,
            },
        })


@api_view(['GET'])
@permission_classes([AllowAny])
def public_settings(request):
    skip_cache = request.query_params.get('skipCache') == 'true'
    if not skip_cache:
        cached = get_cache(PUBLIC_SETTINGS_CACHE_KEY)
        if cached:
            return Response(cached)

    try:
        result = build_public_settings()
    except Exception as e:
        logger.error(f"Error fetching public settings: {e}")
        return Response({'error': 'Failed to retrieve settings'}, status=500)

    set_cache(PUBLIC_SETTINGS_CACHE_KEY, result, CACHE_TTL)
    return Response(result)


@api_view(['GET'])
@permission_classes([AllowAny])
def feature_check(request):
    name = request.query_params.get('name')
    if not name:
        return Response({'error': 'Feature flag name is required'}, status=400)

    try:
        enabled = is_feature_enabled(
            name,
            user=request.user,
            user_agent=get_user_agent(request),
            ip_address=get_client_ip(request),
        )
    except Exception as e:
        logger.error(f"Error checking feature flag: {e}")
        return Response({'error': 'Failed to check feature flag'}, status=500)
    return Response({'enabled': enabled})


class FeatureFlagViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAdmin, HasAdminPermission]
    required_permission = 'settings'
    serializer_class = FeatureFlagSerializer
    queryset = FeatureFlag.objects.select_related('created_by').order_by('-updated_at')
    lookup_field = 'name'
    lookup_value_regex = '[^/]+'

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)
        logger.info(f"Feature flag {serializer.instance.name} created by user {self.request.user.id}")
