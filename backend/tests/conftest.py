"""
Pytest configuration and fixtures for backend tests.

Provides shared fixtures for database sessions, authentication, fake channel
senders and the API test client.
"""

from collections.abc import AsyncGenerator
from typing import Any
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import notification_service.orm.models  # noqa: F401
from notification_service.api.dependencies import get_channel_senders, get_db_session
from notification_service.api.main import app
from notification_service.auth.token_service import TokenService
from notification_service.config import settings
from notification_service.database import Base
from notification_service.models.notification import (
    DeliveryResult,
    NotificationChannel,
    NotificationPayload,
)

# =============================
# Fake Channel Senders
# =============================


class RecordingSender:
    """Channel sender double that records calls and returns a canned result."""

    def __init__(self, result: DeliveryResult | None = None, error: Exception | None = None):
        self.result = result or DeliveryResult.delivered(message_id="fake-id")
        self.error = error
        self.calls: list[tuple[Any, NotificationPayload]] = []

    async def send(self, address: Any, payload: NotificationPayload) -> DeliveryResult:
        self.calls.append((address, payload))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def fake_senders() -> dict[NotificationChannel, RecordingSender]:
    """One recording sender per channel, all succeeding."""
    return {
        NotificationChannel.PUSH: RecordingSender(DeliveryResult.delivered(status_code=201)),
        NotificationChannel.EMAIL: RecordingSender(
            DeliveryResult.delivered(message_id="<email-1@example.com>")
        ),
        NotificationChannel.SMS: RecordingSender(DeliveryResult.delivered(message_id="SM123")),
    }


# =============================
# Database Fixtures
# =============================


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """
    Create test database engine.

    Uses in-memory SQLite; StaticPool keeps a single connection so every
    session sees the same database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Provide database session for tests."""
    session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_maker() as session:
        yield session
        await session.rollback()


# =============================
# Authentication Fixtures
# =============================


@pytest.fixture
def token_service() -> TokenService:
    """
    Provide TokenService instance for tests.

    Uses settings from config so tokens are accepted by the API dependencies.
    """
    return TokenService(
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        access_token_expire_minutes=settings.jwt_access_token_expire_minutes,
    )


@pytest.fixture
def test_user_id() -> str:
    """Provide a fresh test user ID."""
    return f"user-{uuid4().hex[:12]}"


@pytest.fixture
def test_user_id_2() -> str:
    """Second user ID for isolation tests."""
    return f"user-{uuid4().hex[:12]}"


@pytest.fixture
def auth_headers(token_service: TokenService, test_user_id: str) -> dict[str, str]:
    """Authorization headers with a valid Bearer token for test_user_id."""
    return {"Authorization": f"Bearer {token_service.create_access_token(test_user_id)}"}


@pytest.fixture
def auth_headers_2(token_service: TokenService, test_user_id_2: str) -> dict[str, str]:
    """Authorization headers for the second test user."""
    return {"Authorization": f"Bearer {token_service.create_access_token(test_user_id_2)}"}


# =============================
# API Client
# =============================


@pytest_asyncio.fixture(scope="function")
async def async_client(
    db_session: AsyncSession, fake_senders
) -> AsyncGenerator[AsyncClient, None]:
    """
    Provide async HTTP client for API testing.

    Overrides the database dependency with the test session and the channel
    senders with recording fakes.
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db
    app.dependency_overrides[get_channel_senders] = lambda: fake_senders

    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()
