import logging

from django.utils import timezone
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from core.cache import delete_cache, get_cache, set_cache
from .models import Notification
from .serializers import ContactSerializer, NotificationPreferenceSerializer, NotificationSerializer
from .services import get_preferences
from .tasks import send_contact_email

logger = logging.getLogger(__name__)

PREFERENCES_CACHE_TTL = 300


class NotificationViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, mixins.DestroyModelMixin,
                          viewsets.GenericViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = NotificationSerializer

    def get_queryset(self):
        queryset = Notification.objects.filter(user=self.request.user).select_related('sender')
        if self.request.query_params.get('unread') == 'true':
            queryset = queryset.filter(is_read=False)
        category = self.request.query_params.get('category')
        if category:
            queryset = queryset.filter(category=category)
        return queryset

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        unread = Notification.objects.filter(user=request.user, is_read=False).count()
        return Response({'notifications': response.data, 'unreadCount': unread})

    @action(detail=True, methods=['post', 'patch'])
    def read(self, request, pk=None):
        notification = self.get_object()
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = timezone.now()
            notification.save(update_fields=['is_read', 'read_at'])
        return Response(NotificationSerializer(notification).data)

    @action(detail=False, methods=['post'], url_path='read-all')
    def read_all(self, request):
        updated = Notification.objects.filter(user=request.user, is_read=False).update(
            is_read=True, read_at=timezone.now()
        )
        return Response({'success': True, 'updated': updated})


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def notification_preferences(request):
    cache_key = f"partner:notifications:{request.user.id}"

    if request.method == 'GET':
        cached = get_cache(cache_key)
        if cached:
            return Response(cached)
        try:
            data = dict(NotificationPreferenceSerializer(get_preferences(request.user)).data)
        except Exception as e:
            logger.error(f"Error fetching notification preferences for user {request.user.id}: {e}")
            return Response({'error': 'Failed to fetch notification preferences'}, status=500)
        set_cache(cache_key, data, PREFERENCES_CACHE_TTL)
        return Response(data)

    serializer = NotificationPreferenceSerializer(get_preferences(request.user), data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()

    delete_cache(cache_key)
    delete_cache(f"partner:profile:{request.user.id}")
    logger.info(f"User {request.user.id} updated notification preferences")

    return Response({
        **serializer.data,
        'success': True,
        'message': 'Notification preferences updated successfully',
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def contact(request):
    serializer = ContactSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Invalid contact form data', 'details': serializer.errors}, status=400)

    try:
        send_contact_email.delay(**serializer.validated_data)
    except Exception as e:
        logger.error(f"Error sending contact form from {serializer.validated_data['email']}: {e}")
        return Response({'error': 'Failed to send message'}, status=500)

    return Response({'success': True, 'message': 'Your message has been sent'}, status=status.HTTP_201_CREATED)
