"""
FastAPI Dependencies

Provides dependency injection for database sessions, authentication and the
notification service with its channel senders.
"""

from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from notification_service import database
from notification_service.auth.token_service import TokenService
from notification_service.config import settings
from notification_service.models.notification import NotificationChannel
from notification_service.notifications.channels import ChannelSender, build_channel_senders
from notification_service.notifications.orchestrator import DeliveryOrchestrator
from notification_service.notifications.preferences import PreferenceResolver
from notification_service.notifications.service import NotificationService
from notification_service.repositories.notification_repository import NotificationRepository
from notification_service.repositories.user_settings_repository import UserSettingsRepository

# Security scheme for Bearer token authentication
security = HTTPBearer()

# Token service instance (uses settings for configuration)
token_service = TokenService(
    secret_key=settings.jwt_secret_key,
    algorithm=settings.jwt_algorithm,
    access_token_expire_minutes=settings.jwt_access_token_expire_minutes,
)

# Channel clients are built once per process
_channel_senders: Optional[dict[NotificationChannel, ChannelSender]] = None


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database sessions.

    Provides async database session with automatic cleanup.

    Yields:
        AsyncSession: Database session
    """
    if database.async_session_maker is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not configured",
        )

    async with database.async_session_maker() as session:
        try:
            yield session
            # Commit is handled by individual operations
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    """
    FastAPI dependency to extract and validate current user ID from JWT token.

    Args:
        credentials: HTTP Authorization credentials (Bearer token)

    Returns:
        str: Authenticated user's ID

    Raises:
        HTTPException: 401 if authentication fails
    """
    user_id = token_service.verify_access_token(credentials.credentials)

    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user_id


def get_channel_senders() -> dict[NotificationChannel, ChannelSender]:
    """Return the process-wide channel clients, building them on first use."""
    global _channel_senders

    if _channel_senders is None:
        _channel_senders = build_channel_senders(settings)
    return _channel_senders


async def get_notification_service(
    session: AsyncSession = Depends(get_db_session),
    senders: dict[NotificationChannel, ChannelSender] = Depends(get_channel_senders),
) -> NotificationService:
    """Get a request-scoped notification service bound to the session."""
    settings_repository = UserSettingsRepository(session)

    return NotificationService(
        notification_repository=NotificationRepository(session),
        settings_repository=settings_repository,
        orchestrator=DeliveryOrchestrator(
            preference_resolver=PreferenceResolver(settings_repository),
            senders=senders,
        ),
    )
