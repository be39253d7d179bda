"""
Unit Tests for UserSettingsRepository

Runs against an in-memory SQLite database.
"""

import pytest

from notification_service.orm.models import UserSettingsORM
from notification_service.repositories.user_settings_repository import UserSettingsRepository

SUBSCRIPTION = {
    "endpoint": "https://fcm.googleapis.com/fcm/send/abc123",
    "keys": {"p256dh": "BNcRdre", "auth": "tBHItJI5"},
}


@pytest.fixture
def repository(db_session):
    return UserSettingsRepository(db_session)


class TestUserSettingsRepository:
    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, repository):
        assert await repository.get("user-1") is None

    @pytest.mark.asyncio
    async def test_upsert_creates_row_with_null_flags(self, repository):
        settings = await repository.upsert("user-1", {"email": "jane@example.com"})

        assert settings.user_id == "user-1"
        assert settings.email == "jane@example.com"
        assert settings.push_enabled is None
        assert settings.email_enabled is None
        assert settings.sms_enabled is None
        assert settings.updated_at is not None

    @pytest.mark.asyncio
    async def test_upsert_partial_update_keeps_other_fields(self, repository):
        await repository.upsert(
            "user-1",
            {"push_enabled": True, "push_subscription": SUBSCRIPTION, "email": "jane@example.com"},
        )

        settings = await repository.upsert("user-1", {"email_enabled": False})

        assert settings.push_enabled is True
        assert settings.email_enabled is False
        assert settings.email == "jane@example.com"
        assert settings.push_subscription.endpoint == SUBSCRIPTION["endpoint"]
        assert settings.push_subscription.keys.auth == "tBHItJI5"

        assert await repository.get("user-1") == settings

    @pytest.mark.asyncio
    async def test_upsert_rejects_unknown_fields(self, repository):
        with pytest.raises(ValueError):
            await repository.upsert("user-1", {"is_admin": True})

    @pytest.mark.asyncio
    async def test_invalid_stored_subscription_is_ignored(self, repository, db_session):
        db_session.add(
            UserSettingsORM(user_id="user-1", push_enabled=True, push_subscription={"bogus": 1})
        )
        await db_session.commit()

        settings = await repository.get("user-1")

        assert settings.push_enabled is True
        assert settings.push_subscription is None
