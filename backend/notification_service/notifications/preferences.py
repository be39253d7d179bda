"""
Preference Resolver

Loads a user's channel enablement flags and addressing data for a single
delivery. Lookups fail open: a missing row or a failing store yields the
default preferences (push and email enabled, SMS disabled, no addresses).
"""

from typing import Optional, Protocol

import structlog

from notification_service.models.notification import UserPreferences, UserSettings

logger = structlog.get_logger(__name__)


class UserSettingsStore(Protocol):
    async def get(self, user_id: str) -> Optional[UserSettings]: ...


class PreferenceResolver:
    """Resolve per-request preference snapshots. Nothing is cached."""

    def __init__(self, settings_store: UserSettingsStore):
        """
        Args:
            settings_store: Source of stored user settings (usually UserSettingsRepository)
        """
        self.settings_store = settings_store

    async def resolve(self, user_id: str) -> UserPreferences:
        """
        Resolve the preferences of a user.

        Args:
            user_id: User id

        Returns:
            UserPreferences; defaults when nothing usable is stored. Never raises.
        """
        try:
            stored = await self.settings_store.get(user_id)
        except Exception as e:
            logger.warning(
                "Preference lookup failed, using defaults",
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return UserPreferences.defaults(user_id)

        if stored is None:
            logger.debug("No stored settings for user, using defaults", user_id=user_id)
            return UserPreferences.defaults(user_id)

        return UserPreferences.from_settings(stored)
