import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

from .models import Notification, NotificationPreference
from .serializers import NotificationSerializer

logger = logging.getLogger(__name__)


def notification_group(user_id):
    return f"notifications_{user_id}"


def get_preferences(user):
    preference, _ = NotificationPreference.objects.get_or_create(user=user)
    return preference


def _phone_number(user):
    for profile in ('partner', 'advertiser'):
        related = getattr(user, profile, None)
        if related is not None and related.phone_number:
            return related.phone_number
    return None


def push_notification(notification):
    """Send a stored notification to the user's open websocket connections."""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    try:
        async_to_sync(channel_layer.group_send)(
            notification_group(notification.user_id),
            {'type': 'notification.message', 'notification': NotificationSerializer(notification).data},
        )
    except Exception as e:
        logger.error(f"Websocket push failed for notification {notification.id}: {e}")


def notify(user, title, message, type='SYSTEM', category='system', related_data=None, sender=None,
           priority='NORMAL'):
    """Store a notification, push it live and queue email/SMS per the user's preferences."""
    from .tasks import send_notification_email, send_sms

    notification = Notification.objects.create(
        user=user,
        sender=sender,
        title=title,
        message=message,
        type=type,
        category=category,
        priority=priority,
        related_data=related_data or {},
    )
    transaction.on_commit(lambda: push_notification(notification))

    preferences = get_preferences(user)
    if not preferences.allows(category):
        return notification

    if preferences.email and user.email:
        transaction.on_commit(lambda: send_notification_email.delay(notification.id))
    phone_number = _phone_number(user)
    if preferences.sms and phone_number:
        transaction.on_commit(lambda: send_sms.delay(phone_number, f"{title}: {message}"))
    return notification
