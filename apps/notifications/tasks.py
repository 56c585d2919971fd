import logging

import requests
from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from core.circuit_breaker import CircuitBreaker
from .models import Notification

logger = logging.getLogger(__name__)


class SmsProviderUnavailable(requests.HTTPError):
    """The SMS provider answered with a 5xx status."""


# 4xx answers (bad number, rejected sender) are per-recipient and neither retried nor counted
SMS_PROVIDER_FAILURES = (requests.ConnectionError, requests.Timeout, SmsProviderUnavailable)

sms_circuit = CircuitBreaker(failure_threshold=5, recovery_timeout=60,
                             expected_exception=SMS_PROVIDER_FAILURES)


@sms_circuit
@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=4, max=10),
    retry=retry_if_exception_type(SMS_PROVIDER_FAILURES),
    reraise=True,
)
def post_sms(phone_number, message):
    response = requests.post(
        settings.SMS_API_URL,
        json={'to': phone_number, 'message': message, 'senderId': settings.SMS_SENDER_ID},
        headers={'Authorization': f"Bearer {settings.SMS_API_KEY}"},
        timeout=10,
    )
    if response.status_code >= 500:
        raise SmsProviderUnavailable(f"SMS provider returned {response.status_code}", response=response)
    response.raise_for_status()
    return response.json() if response.content else {}


@shared_task
def send_sms(phone_number, message):
    if not settings.SMS_API_URL:
        logger.warning(f"SMS provider not configured, dropping message to {phone_number[-4:]}")
        return {'sent': False}
    result = post_sms(phone_number, message)
    logger.info(f"SMS sent to ...{phone_number[-4:]}")
    return {'sent': True, 'provider': result}


@shared_task
@retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=4, max=10))
def send_notification_email(notification_id):
    notification = Notification.objects.select_related('user').get(pk=notification_id)
    send_mail(
        notification.title,
        f"{notification.message}\n\n{settings.FRONTEND_URL}/notifications",
        settings.DEFAULT_FROM_EMAIL,
        [notification.user.email],
    )
    logger.info(f"Notification {notification.id} emailed to user {notification.user_id}")
    return {'sent': True}


@shared_task
@retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=4, max=10))
def send_contact_email(name, email, subject, message, company='', phone=''):
    body = '\n'.join([
        f"From: {name} <{email}>",
        f"Company: {company or '-'}",
        f"Phone: {phone or '-'}",
        '',
        message,
    ])
    send_mail(f"[Contact] {subject}", body, settings.DEFAULT_FROM_EMAIL, [settings.SUPPORT_EMAIL])
    return {'sent': True}
