"""
Notification data models for the multi-channel dispatcher.

This module defines Pydantic models for notification records, user channel
settings, the normalized payload handed to channel senders, per-channel
delivery results and the request/response bodies of the HTTP API.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")

# Column widths of the notifications table; the message body is unbounded text
USER_ID_MAX_LENGTH = 128
TYPE_MAX_LENGTH = 50
TITLE_MAX_LENGTH = 200


class NotificationChannel(str, Enum):
    """Available notification delivery channels."""

    PUSH = "push"  # Browser push notification (Web Push / VAPID)
    EMAIL = "email"
    SMS = "sms"


class Notification(BaseModel):
    """
    Individual notification record persisted to database.

    The type tag is exposed as ``type`` in API payloads, matching the request
    body and the stored column.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    user_id: str
    notification_type: str = Field(..., alias="type", max_length=TYPE_MAX_LENGTH)
    title: str = Field(..., max_length=TITLE_MAX_LENGTH)
    message: str
    data: dict[str, Any] = Field(default_factory=dict)  # Opaque to the dispatcher
    read: bool = False
    read_at: Optional[datetime] = None
    created_at: datetime


# ============================================================================
# Channel addressing and preferences
# ============================================================================


class PushSubscriptionKeys(BaseModel):
    """Encryption keys of a browser push subscription."""

    p256dh: str  # Public key for encryption
    auth: str  # Authentication secret


class PushSubscription(BaseModel):
    """Browser push notification subscription info.

    Mirrors the JSON produced by ``PushSubscription.toJSON()`` in the browser.
    """

    model_config = ConfigDict(populate_by_name=True)

    endpoint: str = Field(..., min_length=1)
    keys: PushSubscriptionKeys
    expiration_time: Optional[int] = Field(default=None, alias="expirationTime")

    def to_subscription_info(self) -> dict[str, Any]:
        """Return the subscription in the shape expected by pywebpush."""
        return {
            "endpoint": self.endpoint,
            "keys": {"p256dh": self.keys.p256dh, "auth": self.keys.auth},
        }


class UserSettings(BaseModel):
    """Stored channel settings of a user, as persisted.

    Enablement flags are nullable: ``None`` means the user never chose and the
    resolver applies the default.
    """

    user_id: str
    push_enabled: Optional[bool] = None
    email_enabled: Optional[bool] = None
    sms_enabled: Optional[bool] = None
    push_subscription: Optional[PushSubscription] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    updated_at: Optional[datetime] = None


class UserPreferences(BaseModel):
    """Resolved per-channel preferences used for a single delivery.

    Defaults (push and email on, sms off, no addressing data) apply to every
    flag that is not stored.
    """

    user_id: str
    push_enabled: bool = True
    email_enabled: bool = True
    sms_enabled: bool = False
    push_subscription: Optional[PushSubscription] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None

    @classmethod
    def defaults(cls, user_id: str) -> "UserPreferences":
        """Fail-open preferences for a user with no usable stored settings."""
        return cls(user_id=user_id)

    @classmethod
    def from_settings(cls, stored: UserSettings) -> "UserPreferences":
        """Overlay stored settings on the defaults; NULL flags keep the default."""
        flags = {
            name: value
            for name, value in (
                ("push_enabled", stored.push_enabled),
                ("email_enabled", stored.email_enabled),
                ("sms_enabled", stored.sms_enabled),
            )
            if value is not None
        }
        return cls(
            user_id=stored.user_id,
            push_subscription=stored.push_subscription,
            email=stored.email,
            phone_number=stored.phone_number,
            **flags,
        )

    def is_enabled(self, channel: NotificationChannel) -> bool:
        """Return the enablement flag for a channel."""
        if channel == NotificationChannel.PUSH:
            return self.push_enabled
        if channel == NotificationChannel.EMAIL:
            return self.email_enabled
        return self.sms_enabled

    def address_for(self, channel: NotificationChannel) -> Optional[Any]:
        """Return the addressing data for a channel, or None if missing."""
        if channel == NotificationChannel.PUSH:
            return self.push_subscription
        if channel == NotificationChannel.EMAIL:
            return self.email or None
        return self.phone_number or None


# ============================================================================
# Delivery
# ============================================================================


class NotificationPayload(BaseModel):
    """Normalized message handed to every channel sender."""

    notification_id: UUID
    notification_type: str
    title: str
    body: str
    data: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationPayload":
        return cls(
            notification_id=notification.id,
            notification_type=notification.notification_type,
            title=notification.title,
            body=notification.message,
            data=notification.data,
            created_at=notification.created_at,
        )


class DeliveryResult(BaseModel):
    """Outcome of one delivery attempt on one channel.

    On success carries the provider acknowledgment (``status_code`` for push,
    ``message_id`` for email and SMS); on failure a human-readable ``error``.
    """

    success: bool
    status_code: Optional[int] = None
    message_id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def delivered(
        cls, status_code: Optional[int] = None, message_id: Optional[str] = None
    ) -> "DeliveryResult":
        return cls(success=True, status_code=status_code, message_id=message_id)

    @classmethod
    def failed(cls, error: str, status_code: Optional[int] = None) -> "DeliveryResult":
        return cls(success=False, error=error, status_code=status_code)


class SendNotificationResult(BaseModel):
    """Created record plus the per-channel outcome map."""

    notification: Notification
    delivery_results: dict[str, DeliveryResult] = Field(default_factory=dict)


class NotificationPage(BaseModel):
    """One page of a user's notifications, newest first."""

    items: list[Notification]
    page: int
    limit: int
    has_more: bool


# ============================================================================
# API request models
# ============================================================================


class SendNotificationRequest(BaseModel):
    """
    Request body of POST /send.

    Required fields are validated by the service so that a missing field is a
    400 with a single message rather than a schema error.
    """

    user_id: Optional[str] = Field(default=None, alias="userId")
    type: Optional[str] = None
    title: Optional[str] = None
    message: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    channels: Optional[list[str]] = Field(
        default=None,
        description="Requested channels; defaults to ['push'] when omitted",
    )

    model_config = ConfigDict(populate_by_name=True)


class PushSubscriptionRequest(BaseModel):
    """Request body of POST /push-subscription."""

    subscription: Optional[PushSubscription] = None


class PreferencesUpdate(BaseModel):
    """
    Partial update of a user's channel settings.

    Only fields present in the request are changed.
    """

    push_enabled: Optional[bool] = None
    email_enabled: Optional[bool] = None
    sms_enabled: Optional[bool] = None
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None  # E.164 format: +1234567890

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, v: Optional[str]) -> Optional[str]:
        """Validate phone number is in E.164 format."""
        if v is None:
            return v
        if not E164_PATTERN.match(v):
            raise ValueError("Phone number must be in E.164 format (e.g., +12345678901)")
        return v


# ============================================================================
# API response models
# ============================================================================


class SendNotificationResponse(BaseModel):
    success: bool = True
    message: str = "Notification sent successfully"
    data: SendNotificationResult


class Pagination(BaseModel):
    page: int
    limit: int
    has_more: bool


class NotificationListData(BaseModel):
    notifications: list[Notification]
    pagination: Pagination


class NotificationListResponse(BaseModel):
    success: bool = True
    data: NotificationListData


class NotificationResponse(BaseModel):
    success: bool = True
    data: Notification


class MessageResponse(BaseModel):
    """Acknowledgement without a payload."""

    success: bool = True
    message: str


class UserSettingsResponse(BaseModel):
    success: bool = True
    data: UserSettings


class PreferencesResponse(BaseModel):
    success: bool = True
    data: UserPreferences
