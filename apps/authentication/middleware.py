import logging

from django.http import JsonResponse
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken

logger = logging.getLogger(__name__)


class PortalAccessMiddleware:
    """Gate the three portals by role before any view runs.

    Each portal prefix lists the roles allowed behind it. Requests without a
    valid bearer token get a JSON 401, requests with the wrong role a 403.
    """

    portal_roles = {
        '/api/v1/admin/': ('ADMIN',),
        '/api/v1/advertiser/': ('ADVERTISER',),
        '/api/v1/partner/': ('PARTNER',),
    }

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        allowed_roles = self.get_allowed_roles(request.path)
        if allowed_roles is None:
            return self.get_response(request)

        token = self.get_token_from_request(request)
        if token is None:
            return JsonResponse({'error': 'Unauthorized'}, status=401)

        auth = JWTAuthentication()
        try:
            validated_token = auth.get_validated_token(token)
            user = auth.get_user(validated_token)
        except (InvalidToken, AuthenticationFailed) as e:
            logger.info(f"Rejected portal token for {request.path}: {e}")
            return JsonResponse({'error': 'Unauthorized'}, status=401)

        if user.role not in allowed_roles:
            logger.warning(f"User {user.id} with role {user.role} denied access to {request.path}")
            return JsonResponse({'error': 'Forbidden'}, status=403)

        request.user = user
        return self.get_response(request)

    def get_allowed_roles(self, path):
        for prefix, roles in self.portal_roles.items():
            if path.startswith(prefix):
                return roles
        return None

    def get_token_from_request(self, request):
        header = request.META.get('HTTP_AUTHORIZATION')
        if header and header.startswith('Bearer '):
            return header.split(' ')[1].encode('utf-8')
        return None
