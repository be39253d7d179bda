"""
Shared fixtures for notification tests.

Provides common fixtures used across the push, email, SMS, orchestrator and
service tests.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from notification_service.models.notification import (
    Notification,
    NotificationPayload,
    PushSubscription,
    PushSubscriptionKeys,
    UserSettings,
)


@pytest.fixture
def sample_user_id():
    """Generate a sample user ID."""
    return f"user-{uuid4().hex[:8]}"


@pytest.fixture
def sample_notification(sample_user_id):
    """Create a sample persisted notification."""
    return Notification(
        id=uuid4(),
        user_id=sample_user_id,
        notification_type="friend_request",
        title="New friend request",
        message="Alex wants to connect with you",
        data={"from_user_id": "user-42"},
        read=False,
        created_at=datetime(2026, 3, 14, 9, 30, tzinfo=UTC),
    )


@pytest.fixture
def sample_payload(sample_notification):
    """Normalized payload for the sample notification."""
    return NotificationPayload.from_notification(sample_notification)


@pytest.fixture
def sample_push_subscription():
    """A valid browser push subscription with an FCM endpoint."""
    return PushSubscription(
        endpoint="https://fcm.googleapis.com/fcm/send/abc123xyz-very-long-endpoint-token",
        keys=PushSubscriptionKeys(
            p256dh="BNcRdreALRFXTkOOUHK1EtK2wtaz5Ry4YfYCA_0QTpQtUbVlUls0VJXg7A8u-Ts1XbjhazAkj7I99e8QcYP7DkM",
            auth="tBHItJI5svbpez7KI4CCXg",
        ),
    )


@pytest.fixture
def settings_store():
    """Settings store double returning no stored settings."""
    store = AsyncMock()
    store.get.return_value = None
    return store


@pytest.fixture
def make_settings(sample_user_id):
    """Factory for stored UserSettings of the sample user."""

    def _make(**overrides) -> UserSettings:
        return UserSettings(user_id=sample_user_id, **overrides)

    return _make
