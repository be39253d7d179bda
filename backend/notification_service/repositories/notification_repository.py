"""
Notification Repository

Handles database operations for notification records: creation, paginated
listing, read-state transitions and deletion scoped to the owning user.
"""

from datetime import UTC, datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import and_, delete, desc, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notification_service.models.notification import Notification, NotificationPage
from notification_service.orm.models import NotificationORM


class NotificationRepository:
    """Repository for notification database operations."""

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    # =============================
    # Notification CRUD Operations
    # =============================

    async def create(
        self,
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        data: Optional[dict[str, Any]] = None,
    ) -> Notification:
        """
        Create and persist a new notification.

        The record always starts unread with a server-assigned creation time.

        Args:
            user_id: Owning user id
            notification_type: Free-form type tag
            title: Notification title
            message: Notification body
            data: Structured payload, stored as-is

        Returns:
            Created Notification model

        Raises:
            SQLAlchemyError: If the insert or commit fails (session is rolled back)
        """
        notification = NotificationORM(
            user_id=user_id,
            notification_type=notification_type,
            title=title,
            message=message,
            data=data or {},
            read=False,
            read_at=None,
            created_at=datetime.now(UTC),
        )

        try:
            self.session.add(notification)
            await self.session.commit()
            await self.session.refresh(notification)
        except SQLAlchemyError:
            await self.session.rollback()
            raise

        return self._orm_to_notification(notification)

    async def get(
        self, notification_id: UUID, user_id: Optional[str] = None
    ) -> Optional[Notification]:
        """
        Fetch a single notification.

        Args:
            notification_id: Notification UUID
            user_id: If given, only match a notification owned by this user

        Returns:
            Notification model or None if not found
        """
        query = select(NotificationORM).where(NotificationORM.id == notification_id)
        if user_id is not None:
            query = query.where(NotificationORM.user_id == user_id)

        # Bulk updates bypass the identity map; always reload column values
        result = await self.session.execute(query.execution_options(populate_existing=True))
        orm = result.scalar_one_or_none()

        return self._orm_to_notification(orm) if orm else None

    async def list_for_user(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 20,
        unread_only: bool = False,
    ) -> NotificationPage:
        """
        Get one page of a user's notifications, most recent first.

        One extra row is fetched to decide ``has_more`` without a count query.

        Args:
            user_id: Owning user id
            page: 1-based page number
            limit: Page size
            unread_only: Only return unread notifications

        Returns:
            NotificationPage with items and has_more flag
        """
        offset = (page - 1) * limit

        query = select(NotificationORM).where(NotificationORM.user_id == user_id)

        if unread_only:
            query = query.where(NotificationORM.read == False)  # noqa: E712

        query = (
            query.order_by(desc(NotificationORM.created_at), desc(NotificationORM.id))
            .limit(limit + 1)
            .offset(offset)
        )

        result = await self.session.execute(query)
        rows = list(result.scalars().all())

        return NotificationPage(
            items=[self._orm_to_notification(n) for n in rows[:limit]],
            page=page,
            limit=limit,
            has_more=len(rows) > limit,
        )

    async def mark_as_read(
        self, notification_id: UUID, user_id: Optional[str] = None
    ) -> Optional[Notification]:
        """
        Mark a notification as read.

        Only unread rows are updated, so marking an already-read notification
        keeps its original ``read_at``.

        Args:
            notification_id: Notification UUID
            user_id: Owning user id (for authorization check), optional

        Returns:
            The notification after the update, or None if it does not exist
        """
        conditions = [
            NotificationORM.id == notification_id,
            NotificationORM.read == False,  # noqa: E712
        ]
        if user_id is not None:
            conditions.append(NotificationORM.user_id == user_id)

        stmt = update(NotificationORM).where(and_(*conditions)).values(
            read=True, read_at=datetime.now(UTC)
        )

        await self.session.execute(stmt)
        await self.session.commit()

        return await self.get(notification_id, user_id)

    async def mark_all_read(self, user_id: str) -> int:
        """
        Mark every unread notification of a user as read in one statement.

        Args:
            user_id: Owning user id

        Returns:
            Number of notifications updated
        """
        stmt = (
            update(NotificationORM)
            .where(
                and_(
                    NotificationORM.user_id == user_id,
                    NotificationORM.read == False,  # noqa: E712
                )
            )
            .values(read=True, read_at=datetime.now(UTC))
        )

        result = await self.session.execute(stmt)
        await self.session.commit()

        return result.rowcount

    async def delete(self, notification_id: UUID, user_id: str) -> bool:
        """
        Delete a notification owned by the given user.

        Args:
            notification_id: Notification UUID
            user_id: Owning user id

        Returns:
            True if notification was deleted, False if not found
        """
        stmt = delete(NotificationORM).where(
            and_(
                NotificationORM.id == notification_id,
                NotificationORM.user_id == user_id,
            )
        )

        result = await self.session.execute(stmt)
        await self.session.commit()

        return result.rowcount > 0

    # =============================
    # Helper Methods
    # =============================

    def _orm_to_notification(self, orm: NotificationORM) -> Notification:
        """Convert ORM model to Pydantic model."""
        return Notification(
            id=orm.id,
            user_id=orm.user_id,
            notification_type=orm.notification_type,
            title=orm.title,
            message=orm.message,
            data=orm.data or {},
            read=orm.read,
            read_at=orm.read_at,
            created_at=orm.created_at,
        )
