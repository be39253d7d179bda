"""
Channel sender registry.

Every channel client exposes ``send(address, payload) -> DeliveryResult`` and
never raises for provider errors. ``build_channel_senders`` constructs one
client per channel from application settings; the API builds them once at
startup and injects them into each request's orchestrator.
"""

from typing import Any, Protocol

from notification_service.config import Settings
from notification_service.models.notification import (
    DeliveryResult,
    NotificationChannel,
    NotificationPayload,
)
from notification_service.notifications.email_client import EmailClient
from notification_service.notifications.push_client import PushClient
from notification_service.notifications.twilio_client import TwilioClient


class ChannelSender(Protocol):
    """Uniform contract of a channel client."""

    async def send(self, address: Any, payload: NotificationPayload) -> DeliveryResult: ...


def build_channel_senders(settings: Settings) -> dict[NotificationChannel, ChannelSender]:
    """
    Construct the push, email and SMS clients from settings.

    Args:
        settings: Application settings

    Returns:
        Mapping of channel to its sender
    """
    test_mode = settings.notification_test_mode
    timeout = settings.transport_timeout_seconds

    return {
        NotificationChannel.PUSH: PushClient(
            vapid_private_key=settings.vapid_private_key,
            vapid_claims_email=settings.vapid_claims_email,
            icon=settings.push_icon,
            badge=settings.push_badge,
            timeout=timeout,
            test_mode=test_mode,
        ),
        NotificationChannel.EMAIL: EmailClient(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_user=settings.smtp_user,
            smtp_password=settings.smtp_password,
            from_email=settings.smtp_from_email,
            use_tls=settings.smtp_use_tls,
            brand_name=settings.email_brand_name,
            timeout=timeout,
            test_mode=test_mode,
        ),
        NotificationChannel.SMS: TwilioClient(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
            phone_number=settings.twilio_phone_number,
            timeout=timeout,
            test_mode=test_mode,
        ),
    }
