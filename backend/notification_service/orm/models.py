"""
SQLAlchemy ORM Models for the notification service.

These models map to database tables and enable type-safe querying through
SQLAlchemy ORM.

Models:
-------
- NotificationORM: Notification records (one per send request)
- UserSettingsORM: Per-user channel enablement and addressing data
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import JSON, TIMESTAMP, Boolean, Index, String, Text, Uuid, false
from sqlalchemy.orm import Mapped, mapped_column

from notification_service.database import Base


class NotificationORM(Base):
    """
    User notifications, independent of delivery outcome.

    Table: notifications
    Primary Key: id (UUID)
    Indexes: idx_notifications_user_created, idx_notifications_user_read
    """

    __tablename__ = "notifications"

    # Primary key
    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )

    # Owner (opaque id issued by the identity provider)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)

    # Classification
    notification_type: Mapped[str] = mapped_column("type", String(50), nullable=False)

    # Content
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    # Status
    read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    read_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )

    __table_args__ = (
        Index("idx_notifications_user_created", "user_id", "created_at"),
        Index("idx_notifications_user_read", "user_id", "read"),
    )


class UserSettingsORM(Base):
    """
    Channel settings of a user.

    Enablement flags are nullable; NULL means "use the default".

    Table: user_settings
    Primary Key: user_id
    """

    __tablename__ = "user_settings"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)

    # Channel enablement
    push_enabled: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    email_enabled: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    sms_enabled: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Addressing data
    push_subscription: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)  # E.164

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )
