"""
Notification service exceptions.

Every error raised by the notification core derives from
NotificationServiceError and carries a human-readable message plus optional
structured details. Channel delivery failures are never raised; they are
reported as failed DeliveryResult values.
"""

from typing import Any, Optional


class NotificationServiceError(Exception):
    """Base exception for notification service errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotificationValidationError(NotificationServiceError):
    """Request is missing required fields or a field exceeds its stored width."""


class NotificationRecordError(NotificationServiceError):
    """The notification record could not be persisted."""


class NotificationNotFoundError(NotificationServiceError):
    """No notification with the given id exists for the user."""

    def __init__(self, notification_id: Any, user_id: Optional[str] = None):
        super().__init__(
            f"Notification {notification_id} not found",
            details={"notification_id": str(notification_id), "user_id": user_id},
        )
        self.notification_id = notification_id
        self.user_id = user_id
