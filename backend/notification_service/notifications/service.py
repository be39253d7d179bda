"""
Notification Service Core

Entry point for every notification operation exposed by the API. Handles:
- Request validation (required fields, column widths)
- Persistence of the notification record
- Delegation of the channel fan-out to the DeliveryOrchestrator
- Read-state transitions, deletion and user channel settings
"""

from typing import Any, Optional
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError

from notification_service.models.notification import (
    TITLE_MAX_LENGTH,
    TYPE_MAX_LENGTH,
    USER_ID_MAX_LENGTH,
    Notification,
    NotificationChannel,
    NotificationPage,
    PreferencesUpdate,
    PushSubscription,
    SendNotificationResult,
    UserPreferences,
    UserSettings,
)
from notification_service.notifications.exceptions import (
    NotificationNotFoundError,
    NotificationRecordError,
    NotificationValidationError,
)
from notification_service.notifications.orchestrator import DeliveryOrchestrator
from notification_service.repositories.notification_repository import NotificationRepository
from notification_service.repositories.user_settings_repository import UserSettingsRepository

logger = structlog.get_logger(__name__)

DEFAULT_CHANNELS = (NotificationChannel.PUSH,)
MAX_PAGE_SIZE = 100


class NotificationService:
    """
    Core notification service.

    Validates input before any side effect, persists the record, then fans
    delivery out through the orchestrator.
    """

    def __init__(
        self,
        notification_repository: NotificationRepository,
        settings_repository: UserSettingsRepository,
        orchestrator: DeliveryOrchestrator,
    ):
        """
        Initialize notification service.

        Args:
            notification_repository: Notification record store
            settings_repository: User channel settings store
            orchestrator: Delivery fan-out
        """
        self.notification_repository = notification_repository
        self.settings_repository = settings_repository
        self.orchestrator = orchestrator

    async def send_notification(
        self,
        user_id: Optional[str],
        notification_type: Optional[str],
        title: Optional[str],
        message: Optional[str],
        data: Optional[dict[str, Any]] = None,
        channels: Optional[list[str]] = None,
    ) -> SendNotificationResult:
        """
        Create a notification record and deliver it.

        Args:
            user_id: Target user id
            notification_type: Free-form type tag
            title: Notification title
            message: Notification body
            data: Structured payload passed to the channels
            channels: Requested channel names; None means ["push"], [] means none.
                Names that are not a known channel are skipped.

        Returns:
            The created notification and the per-channel results

        Raises:
            NotificationValidationError: Missing or oversized fields (no side effects)
            NotificationRecordError: Record could not be persisted (no delivery attempted)
        """
        missing = [
            name
            for name, value in (
                ("userId", user_id),
                ("type", notification_type),
                ("title", title),
                ("message", message),
            )
            if not value
        ]
        if missing:
            raise NotificationValidationError(
                "Missing required fields", details={"missing": missing}
            )

        for field, value, max_length in (
            ("userId", user_id, USER_ID_MAX_LENGTH),
            ("type", notification_type, TYPE_MAX_LENGTH),
            ("title", title, TITLE_MAX_LENGTH),
        ):
            if len(value) > max_length:
                raise NotificationValidationError(
                    f"{field} must be at most {max_length} characters",
                    details={"field": field, "max_length": max_length},
                )

        requested = self._parse_channels(channels)

        try:
            notification = await self.notification_repository.create(
                user_id=user_id,
                notification_type=notification_type,
                title=title,
                message=message,
                data=data or {},
            )
        except SQLAlchemyError as e:
            logger.error(
                "Failed to create notification record",
                user_id=user_id,
                notification_type=notification_type,
                error=str(e),
            )
            raise NotificationRecordError(
                "Failed to send notification", details={"error": str(e)}
            ) from e

        logger.info(
            "Notification created",
            notification_id=str(notification.id),
            user_id=user_id,
            notification_type=notification_type,
            channels=[c.value for c in requested],
        )

        delivery_results = await self.orchestrator.deliver(user_id, notification, requested)

        return SendNotificationResult(
            notification=notification,
            delivery_results=delivery_results,
        )

    async def list_notifications(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 20,
        unread_only: bool = False,
    ) -> NotificationPage:
        """Return one page of a user's notifications, newest first."""
        if page < 1:
            raise NotificationValidationError("page must be >= 1", details={"page": page})
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise NotificationValidationError(
                f"limit must be between 1 and {MAX_PAGE_SIZE}", details={"limit": limit}
            )

        return await self.notification_repository.list_for_user(
            user_id, page=page, limit=limit, unread_only=unread_only
        )

    async def mark_read(
        self, notification_id: UUID, user_id: Optional[str] = None
    ) -> Notification:
        """
        Mark a notification as read.

        Marking an already-read notification again is a no-op that keeps the
        original read timestamp.

        Raises:
            NotificationNotFoundError: No such notification (for this user)
        """
        notification = await self.notification_repository.mark_as_read(notification_id, user_id)
        if notification is None:
            raise NotificationNotFoundError(notification_id, user_id)

        logger.info(
            "Notification marked read",
            notification_id=str(notification_id),
            user_id=notification.user_id,
        )
        return notification

    async def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of a user read; returns the count."""
        count = await self.notification_repository.mark_all_read(user_id)
        logger.info("All notifications marked read", user_id=user_id, count=count)
        return count

    async def delete_notification(self, notification_id: UUID, user_id: str) -> None:
        """
        Delete a notification owned by the user.

        Raises:
            NotificationNotFoundError: No such notification for this user
        """
        deleted = await self.notification_repository.delete(notification_id, user_id)
        if not deleted:
            raise NotificationNotFoundError(notification_id, user_id)

        logger.info(
            "Notification deleted", notification_id=str(notification_id), user_id=user_id
        )

    async def update_push_subscription(
        self, user_id: str, subscription: Optional[PushSubscription]
    ) -> UserSettings:
        """
        Store a browser push subscription and enable the push channel.

        Raises:
            NotificationValidationError: No subscription given
        """
        if subscription is None:
            raise NotificationValidationError("Push subscription required")

        settings = await self.settings_repository.upsert(
            user_id,
            {
                "push_subscription": subscription.model_dump(by_alias=True, exclude_none=True),
                "push_enabled": True,
            },
        )

        logger.info("Push subscription updated", user_id=user_id)
        return settings

    async def update_preferences(self, user_id: str, update: PreferencesUpdate) -> UserSettings:
        """Apply a partial update; fields absent from the request are left unchanged."""
        values = update.model_dump(exclude_unset=True, exclude_none=True)

        settings = await self.settings_repository.upsert(user_id, values)

        logger.info("Notification preferences updated", user_id=user_id, fields=sorted(values))
        return settings

    async def get_preferences(self, user_id: str) -> UserPreferences:
        """Return the resolved preferences, defaults applied."""
        return await self.orchestrator.preference_resolver.resolve(user_id)

    def _parse_channels(self, channels: Optional[list[str]]) -> list[NotificationChannel]:
        """Convert requested channel names; unknown names are never attempted."""
        if channels is None:
            return list(DEFAULT_CHANNELS)

        parsed = []
        for name in channels:
            try:
                parsed.append(NotificationChannel(name))
            except ValueError:
                logger.debug("Skipping unknown channel", channel=name)

        return parsed
