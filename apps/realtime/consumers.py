import json
import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.utils import timezone
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken

from apps.notifications.models import Notification
from apps.notifications.services import notification_group

logger = logging.getLogger(__name__)


class NotificationConsumer(AsyncWebsocketConsumer):
    """Pushes a user's new notifications; ``?token=<access token>`` authenticates the socket."""

    async def connect(self):
        token = self.get_token_from_scope()
        self.user = await self.authenticate_token(token)

        if not self.user:
            await self.close(code=4001)
            return

        self.group_name = notification_group(self.user.id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

        await self.send(text_data=json.dumps({
            'type': 'unread_count',
            'count': await self.get_unread_count(),
        }))

    async def disconnect(self, close_code):
        if hasattr(self, 'group_name'):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        try:
            payload = json.loads(text_data or '{}')
        except json.JSONDecodeError:
            await self.send(text_data=json.dumps({'type': 'error', 'message': 'Invalid JSON'}))
            return

        if payload.get('action') == 'mark_read' and payload.get('id'):
            await self.mark_read(payload['id'])
            await self.send(text_data=json.dumps({
                'type': 'unread_count',
                'count': await self.get_unread_count(),
            }))

    async def notification_message(self, event):
        await self.send(text_data=json.dumps({
            'type': 'notification',
            'notification': event['notification'],
        }, default=str))

    def get_token_from_scope(self):
        query = parse_qs(self.scope.get('query_string', b'').decode())
        values = query.get('token')
        return values[0] if values else None

    @database_sync_to_async
    def authenticate_token(self, token):
        if not token:
            return None
        jwt_auth = JWTAuthentication()
        try:
            validated_token = jwt_auth.get_validated_token(token.encode())
            return jwt_auth.get_user(validated_token)
        except (InvalidToken, AuthenticationFailed) as e:
            logger.info(f"Rejected websocket token: {e}")
            return None

    @database_sync_to_async
    def get_unread_count(self):
        return Notification.objects.filter(user=self.user, is_read=False).count()

    @database_sync_to_async
    def mark_read(self, notification_id):
        Notification.objects.filter(user=self.user, pk=notification_id, is_read=False).update(
            is_read=True, read_at=timezone.now()
        )
