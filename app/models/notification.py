"""
Gahoi Sathi — Notification model.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, JSONType, utcnow

TYPE_PROFILE_VIEW = "profile_view"
TYPE_INTEREST_RECEIVED = "interest_received"
TYPE_INTEREST_ACCEPTED = "interest_accepted"
TYPE_MESSAGE_RECEIVED = "message_received"
TYPE_SHORTLIST = "shortlist"
TYPE_ADMIN = "admin"

NOTIFICATION_TYPES = (
    TYPE_PROFILE_VIEW,
    TYPE_INTEREST_RECEIVED,
    TYPE_INTEREST_ACCEPTED,
    TYPE_MESSAGE_RECEIVED,
    TYPE_SHORTLIST,
    TYPE_ADMIN,
)


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_read_created", "user_id", "is_read", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    related_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    related_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, nullable=True, comment="Interest, Message or ProfileView id"
    )
    is_read: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )
    read_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    is_admin_notification: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )
    metadata_: Mapped[dict | None] = mapped_column(
        "metadata", JSONType, nullable=True, comment="Extra metadata (column name: metadata)"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    related_user: Mapped["User"] = relationship(
        "User", foreign_keys=[related_user_id], lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Notification {self.type!r} user={self.user_id} read={self.is_read}>"
