"""
Web Push Notification Client

Handles browser push notifications using Web Push protocol with:
- VAPID authentication
- Payload encryption (delegated to pywebpush)
- Expired subscription detection (404/410)
- Per-request transport timeout
"""

import asyncio
import json
from typing import Any, Optional

import structlog

from notification_service.models.notification import (
    DeliveryResult,
    NotificationPayload,
    PushSubscription,
)

logger = structlog.get_logger(__name__)

EXPIRED_SUBSCRIPTION_STATUSES = (404, 410)


class PushClient:
    """
    Web Push client for browser push notifications.

    Uses pywebpush library and VAPID keys for authentication. pywebpush is
    blocking, so every request runs in a worker thread.
    """

    def __init__(
        self,
        vapid_private_key: Optional[str] = None,
        vapid_claims_email: Optional[str] = None,
        icon: str = "/icon-192x192.png",
        badge: str = "/badge-72x72.png",
        timeout: float = 10.0,
        test_mode: bool = False,
    ):
        """
        Initialize push client.

        Args:
            vapid_private_key: VAPID private key for authentication
            vapid_claims_email: Contact for VAPID claims (e.g., mailto:admin@example.com)
            icon: Icon URL shown with the notification
            badge: Badge URL shown with the notification
            timeout: Push service request timeout in seconds
            test_mode: If True, log instead of sending
        """
        self.vapid_private_key = vapid_private_key
        self.vapid_claims_email = vapid_claims_email
        self.icon = icon
        self.badge = badge
        self.timeout = timeout
        self.test_mode = test_mode

        if not test_mode and not all([vapid_private_key, vapid_claims_email]):
            logger.warning(
                "VAPID keys not configured, running in test mode",
                test_mode=True,
            )
            self.test_mode = True

    async def send(
        self,
        subscription: PushSubscription,
        payload: NotificationPayload,
    ) -> DeliveryResult:
        """
        Send push notification to a subscription.

        Args:
            subscription: Push subscription info
            payload: Normalized notification payload

        Returns:
            DeliveryResult with the push service status code on success, or the
            provider error text on failure. Never raises.
        """
        endpoint = self._mask_endpoint(subscription.endpoint)

        if self.test_mode:
            logger.info(
                "TEST MODE: Push notification would be sent",
                endpoint=endpoint,
                title=payload.title,
            )
            return DeliveryResult.delivered(status_code=201, message_id="test-mode")

        from pywebpush import WebPushException, webpush

        try:
            response = await asyncio.to_thread(
                webpush,
                subscription_info=subscription.to_subscription_info(),
                data=json.dumps(self._create_payload(payload)),
                vapid_private_key=self.vapid_private_key,
                # pywebpush adds aud/exp to the claims dict; pass a fresh one
                vapid_claims={"sub": self.vapid_claims_email},
                timeout=self.timeout,
            )
        except WebPushException as e:
            status_code = e.response.status_code if e.response is not None else None

            if status_code in EXPIRED_SUBSCRIPTION_STATUSES:
                logger.warning(
                    "Push subscription expired",
                    endpoint=endpoint,
                    status_code=status_code,
                )
            else:
                logger.error(
                    "Failed to send push notification",
                    endpoint=endpoint,
                    status_code=status_code,
                    error=str(e),
                )

            return DeliveryResult.failed(str(e), status_code=status_code)
        except Exception as e:
            logger.error(
                "Failed to send push notification",
                endpoint=endpoint,
                error=str(e),
                error_type=type(e).__name__,
            )
            return DeliveryResult.failed(str(e) or type(e).__name__)

        status_code = getattr(response, "status_code", None)

        logger.info(
            "Push notification sent successfully",
            endpoint=endpoint,
            notification_id=str(payload.notification_id),
            status_code=status_code,
        )

        return DeliveryResult.delivered(status_code=status_code)

    def _create_payload(self, payload: NotificationPayload) -> dict[str, Any]:
        """
        Create push notification payload.

        Args:
            payload: Normalized notification payload

        Returns:
            Push payload dict consumed by the service worker
        """
        # See: https://developer.mozilla.org/en-US/docs/Web/API/ServiceWorkerRegistration/showNotification
        return {
            "title": payload.title,
            "body": payload.body,
            "icon": self.icon,
            "badge": self.badge,
            "tag": str(payload.notification_id),  # Notification ID for replacement
            "data": {
                **payload.data,
                "notification_id": str(payload.notification_id),
                "notification_type": payload.notification_type,
            },
        }

    def _mask_endpoint(self, endpoint: str) -> str:
        """Mask push endpoint for logging (PII protection)."""
        if len(endpoint) > 40:
            return endpoint[:20] + "..." + endpoint[-10:]
        return endpoint
