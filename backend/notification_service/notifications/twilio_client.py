"""
Twilio SMS Client

Handles SMS notification delivery via Twilio API with:
- Lazy client construction
- Per-request HTTP timeout
- Test mode

The Twilio SDK is blocking, so requests run in a worker thread. One attempt is
made per call; errors are returned as failed DeliveryResult values.
"""

import asyncio
from typing import Optional

import structlog

from notification_service.models.notification import DeliveryResult, NotificationPayload

logger = structlog.get_logger(__name__)


class TwilioClient:
    """
    Twilio SMS client.

    Message body is the notification title and message separated by a newline.
    """

    def __init__(
        self,
        account_sid: Optional[str] = None,
        auth_token: Optional[str] = None,
        phone_number: Optional[str] = None,
        timeout: float = 10.0,
        test_mode: bool = False,
    ):
        """
        Initialize Twilio client.

        Args:
            account_sid: Twilio account SID
            auth_token: Twilio auth token
            phone_number: Twilio phone number (E.164 format)
            timeout: HTTP timeout in seconds for Twilio API calls
            test_mode: If True, log instead of sending
        """
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.phone_number = phone_number
        self.timeout = timeout
        self.test_mode = test_mode

        # Lazy-load Twilio client
        self._client = None

        if not test_mode and not all([account_sid, auth_token, phone_number]):
            logger.warning(
                "Twilio credentials not configured, running in test mode",
                test_mode=True,
            )
            self.test_mode = True

    @property
    def client(self):
        """Lazy-load Twilio client."""
        if not self._client and not self.test_mode:
            from twilio.http.http_client import TwilioHttpClient
            from twilio.rest import Client

            self._client = Client(
                self.account_sid,
                self.auth_token,
                http_client=TwilioHttpClient(timeout=self.timeout),
            )
        return self._client

    async def send(self, phone_number: str, payload: NotificationPayload) -> DeliveryResult:
        """
        Send SMS for a notification.

        Args:
            phone_number: Recipient phone number (E.164 format)
            payload: Normalized notification payload

        Returns:
            DeliveryResult with the Twilio message SID on success, or the
            provider error text on failure. Never raises.
        """
        body = self.format_message(payload)

        # Test mode: just log
        if self.test_mode:
            logger.info(
                "TEST MODE: SMS would be sent",
                phone_number=self._mask_phone(phone_number),
                message=body[:50],
            )
            return DeliveryResult.delivered(message_id="test-mode")

        from twilio.base.exceptions import TwilioRestException

        try:
            message_obj = await asyncio.to_thread(
                self.client.messages.create,
                body=body,
                from_=self.phone_number,
                to=phone_number,
            )
        except TwilioRestException as e:
            logger.error(
                "Failed to send SMS",
                phone_number=self._mask_phone(phone_number),
                status_code=e.status,
                twilio_code=e.code,
                error=e.msg,
            )
            return DeliveryResult.failed(str(e.msg), status_code=e.status)
        except Exception as e:
            logger.error(
                "Failed to send SMS",
                phone_number=self._mask_phone(phone_number),
                error=str(e),
                error_type=type(e).__name__,
            )
            return DeliveryResult.failed(str(e) or type(e).__name__)

        logger.info(
            "SMS sent successfully",
            phone_number=self._mask_phone(phone_number),
            message_sid=message_obj.sid,
            notification_id=str(payload.notification_id),
        )

        return DeliveryResult.delivered(message_id=message_obj.sid)

    @staticmethod
    def format_message(payload: NotificationPayload) -> str:
        """Build the SMS body: title on the first line, message below."""
        return f"{payload.title}\n{payload.body}"

    def _mask_phone(self, phone_number: str) -> str:
        """Mask phone number for logging (PII protection)."""
        if len(phone_number) > 4:
            return phone_number[:2] + "***" + phone_number[-4:]
        return "***"
