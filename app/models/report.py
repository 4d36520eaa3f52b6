"""
Gahoi Sathi — Profile report model (member complaint, reviewed by admins).
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, utcnow

REPORT_REASONS = (
    "inappropriate-content",
    "fake-profile",
    "misleading-information",
    "harassment",
    "spam",
    "other",
)

STATUS_PENDING = "pending"
REPORT_STATUSES = (STATUS_PENDING, "reviewed", "resolved", "dismissed")

DESCRIPTION_MAX_LENGTH = 500
ADMIN_NOTES_MAX_LENGTH = 1000


class ProfileReport(Base):
    __tablename__ = "profile_reports"
    __table_args__ = (
        UniqueConstraint("reported_user_id", "reported_by", name="uq_profile_report_pair"),
        Index("ix_profile_reports_status_created", "status", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    reported_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reported_by: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reason: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(
        String(DESCRIPTION_MAX_LENGTH), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String,
        default=STATUS_PENDING,
        server_default=STATUS_PENDING,
        nullable=False,
        comment="pending / reviewed / resolved / dismissed",
    )
    admin_notes: Mapped[str | None] = mapped_column(
        String(ADMIN_NOTES_MAX_LENGTH), nullable=True
    )
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    # ── Relationships ──────────────────────────────────────────────
    reported_user: Mapped["User"] = relationship(
        "User", foreign_keys=[reported_user_id], lazy="selectin"
    )
    reporter: Mapped["User"] = relationship(
        "User", foreign_keys=[reported_by], lazy="selectin"
    )
    reviewer: Mapped["User | None"] = relationship(
        "User", foreign_keys=[reviewed_by], lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<ProfileReport {self.reported_user_id} by {self.reported_by} status={self.status!r}>"
