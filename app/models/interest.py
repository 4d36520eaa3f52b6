"""
Gahoi Sathi — Interest model (directed accept/reject request).
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, utcnow

STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"
STATUS_REJECTED = "rejected"


class Interest(Base):
    __tablename__ = "interests"
    __table_args__ = (
        UniqueConstraint("from_user_id", "to_user_id", name="uq_interest_pair"),
        Index("ix_interests_to_user_status", "to_user_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    from_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    to_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String,
        default=STATUS_PENDING,
        server_default=STATUS_PENDING,
        nullable=False,
        comment="pending / accepted / rejected",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    responded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # ── Relationships ──────────────────────────────────────────────
    from_user: Mapped["User"] = relationship(
        "User", foreign_keys=[from_user_id], lazy="selectin"
    )
    to_user: Mapped["User"] = relationship(
        "User", foreign_keys=[to_user_id], lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Interest {self.from_user_id} -> {self.to_user_id} status={self.status!r}>"
