import logging

from django.conf import settings
from django.contrib.auth.tokens import default_token_generator
from django.core.mail import send_mail
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode
from rest_framework import status, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from core.utils import get_client_ip, get_user_agent
from .models import ApiKey, LoginHistory, User
from .permissions import HasAdminPermission, IsAdmin
from .serializers import (
    ApiKeySerializer,
    LoginHistorySerializer,
    LoginSerializer,
    PasswordChangeSerializer,
    PasswordResetConfirmSerializer,
    PasswordResetRequestSerializer,
    ProfileSerializer,
    RegisterSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)


def _tokens_for(user):
    refresh = RefreshToken.for_user(user)
    return {'refresh': str(refresh), 'access': str(refresh.access_token)}


def _describe_agent(user_agent):
    ua = user_agent.lower()
    if 'mobile' in ua or 'android' in ua or 'iphone' in ua:
        device = 'Mobile'
    elif 'ipad' in ua or 'tablet' in ua:
        device = 'Tablet'
    else:
        device = 'Desktop'

    for marker, browser in (('edg', 'Edge'), ('chrome', 'Chrome'), ('firefox', 'Firefox'), ('safari', 'Safari')):
        if marker in ua:
            return device, browser
    return device, 'Unknown'


def _record_login(request, user, login_status):
    device, browser = _describe_agent(get_user_agent(request))
    LoginHistory.objects.create(
        user=user,
        ip_address=get_client_ip(request),
        device=device,
        browser=browser,
        status=login_status,
    )


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Create an advertiser or partner account and return a JWT pair."""
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    if User.objects.filter(email__iexact=serializer.validated_data['email']).exists():
        return Response({'error': 'User with this email already exists'}, status=status.HTTP_409_CONFLICT)

    try:
        user = serializer.save()
    except Exception as e:
        logger.error(f"Registration failed for {serializer.validated_data['email']}: {e}")
        return Response({'error': 'An error occurred during registration'}, status=500)

    logger.info(f"Registered {user.role} user {user.id}")
    return Response({
        'message': 'User registered successfully',
        'user': {'id': user.id, 'name': user.name, 'email': user.email, 'role': user.role},
        **_tokens_for(user),
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    serializer = LoginSerializer(data=request.data)
    if not serializer.is_valid():
        failed_user = User.objects.filter(email=request.data.get('email')).first()
        if failed_user:
            _record_login(request, failed_user, 'failed')
        return Response({'error': 'Invalid credentials'}, status=status.HTTP_401_UNAUTHORIZED)

    user = serializer.validated_data['user']
    _record_login(request, user, 'success')
    return Response({
        **_tokens_for(user),
        'user': {'id': user.id, 'name': user.name, 'email': user.email, 'role': user.role},
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    refresh = request.data.get('refresh')
    if not refresh:
        return Response({'error': 'Refresh token is required'}, status=400)
    try:
        RefreshToken(refresh).blacklist()
    except TokenError as e:
        return Response({'error': str(e)}, status=400)
    return Response({'message': 'Logged out'})


@api_view(['POST'])
@permission_classes([AllowAny])
def password_reset(request):
    """Email a reset link; the response never reveals whether the address exists."""
    serializer = PasswordResetRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = User.objects.filter(email__iexact=serializer.validated_data['email'], is_active=True).first()
    if user:
        uid = urlsafe_base64_encode(force_bytes(user.pk))
        token = default_token_generator.make_token(user)
        link = f"{settings.FRONTEND_URL}/reset-password?uid={uid}&token={token}"
        try:
            send_mail(
                'Reset your Lumen password',
                f"Use the link below to choose a new password:\n\n{link}\n",
                settings.DEFAULT_FROM_EMAIL,
                [user.email],
            )
        except Exception as e:
            logger.error(f"Password reset email failed for user {user.id}: {e}")

    return Response({'message': 'If an account exists for this email, a reset link has been sent'})


@api_view(['POST'])
@permission_classes([AllowAny])
def password_reset_confirm(request):
    serializer = PasswordResetConfirmSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user_id = force_str(urlsafe_base64_decode(serializer.validated_data['uid']))
        user = User.objects.get(pk=user_id)
    except (TypeError, ValueError, OverflowError, User.DoesNotExist):
        return Response({'error': 'Invalid or expired reset link'}, status=400)

    if not default_token_generator.check_token(user, serializer.validated_data['token']):
        return Response({'error': 'Invalid or expired reset link'}, status=400)

    user.set_password(serializer.validated_data['password'])
    user.save(update_fields=['password'])
    return Response({'message': 'Password has been reset'})


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def profile(request):
    if request.method == 'GET':
        return Response(ProfileSerializer(request.user).data)

    serializer = ProfileSerializer(request.user, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password(request):
    serializer = PasswordChangeSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)

    request.user.set_password(serializer.validated_data['new_password'])
    request.user.save(update_fields=['password'])
    return Response({'success': True, 'message': 'Password updated successfully'})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def api_keys(request):
    if request.method == 'GET':
        keys = ApiKey.objects.filter(user=request.user)
        return Response(ApiKeySerializer(keys, many=True).data)

    serializer = ApiKeySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    try:
        api_key, raw_key = ApiKey.generate(
            request.user,
            serializer.validated_data['name'],
            permissions=serializer.validated_data.get('permissions'),
            expires_at=serializer.validated_data.get('expires_at'),
        )
    except Exception as e:
        logger.error(f"Error creating API key for user {request.user.id}: {e}")
        return Response({'error': 'Failed to create API key'}, status=500)

    return Response({
        'success': True,
        'key': raw_key,
        'apiKey': ApiKeySerializer(api_key).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def api_key_detail(request, pk):
    deleted, _ = ApiKey.objects.filter(pk=pk, user=request.user).delete()
    if not deleted:
        return Response({'error': 'API key not found'}, status=404)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def login_history(request):
    entries = LoginHistory.objects.filter(user=request.user)[:20]
    return Response(LoginHistorySerializer(entries, many=True).data)


class UserAdminViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAdmin, HasAdminPermission]
    required_permission = 'users'
    serializer_class = UserSerializer
    queryset = User.objects.all()

    def get_queryset(self):
        queryset = User.objects.all().order_by('-date_joined')
        role = self.request.query_params.get('role')
        if role:
            queryset = queryset.filter(role=role.upper())
        search = self.request.query_params.get('search')
        if search:
            queryset = queryset.filter(email__icontains=search) | queryset.filter(name__icontains=search)
        return queryset
