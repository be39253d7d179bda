"""
User Settings Repository

Reads and upserts the per-user channel settings (enablement flags and
addressing data) used by the preference resolver.
"""

from typing import Any, Optional

import structlog
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from notification_service.models.notification import PushSubscription, UserSettings
from notification_service.orm.models import UserSettingsORM

logger = structlog.get_logger(__name__)

_UPDATABLE_FIELDS = frozenset(
    {
        "push_enabled",
        "email_enabled",
        "sms_enabled",
        "push_subscription",
        "email",
        "phone_number",
    }
)


class UserSettingsRepository:
    """Repository for user channel settings."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: str) -> Optional[UserSettings]:
        """
        Get stored settings for a user.

        Args:
            user_id: User id

        Returns:
            UserSettings model or None if the user has no settings row
        """
        orm = await self.session.get(UserSettingsORM, user_id, populate_existing=True)
        return self._orm_to_settings(orm) if orm else None

    async def upsert(self, user_id: str, values: dict[str, Any]) -> UserSettings:
        """
        Create or partially update a user's settings.

        Only keys present in ``values`` are written; other columns keep their
        stored value (or NULL on insert).

        Args:
            user_id: User id
            values: Column values to set

        Returns:
            Settings after the write

        Raises:
            ValueError: If ``values`` contains an unknown column
        """
        unknown = set(values) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown user settings fields: {sorted(unknown)}")

        orm = await self.session.get(UserSettingsORM, user_id)
        if orm is None:
            orm = UserSettingsORM(user_id=user_id)
            self.session.add(orm)

        for key, value in values.items():
            setattr(orm, key, value)

        await self.session.commit()
        await self.session.refresh(orm)

        return self._orm_to_settings(orm)

    # =============================
    # Helper Methods
    # =============================

    def _orm_to_settings(self, orm: UserSettingsORM) -> UserSettings:
        """Convert ORM model to Pydantic model."""
        subscription = None
        if orm.push_subscription:
            try:
                subscription = PushSubscription.model_validate(orm.push_subscription)
            except ValidationError:
                logger.warning("invalid_stored_push_subscription", user_id=orm.user_id)

        return UserSettings(
            user_id=orm.user_id,
            push_enabled=orm.push_enabled,
            email_enabled=orm.email_enabled,
            sms_enabled=orm.sms_enabled,
            push_subscription=subscription,
            email=orm.email,
            phone_number=orm.phone_number,
            updated_at=orm.updated_at,
        )
