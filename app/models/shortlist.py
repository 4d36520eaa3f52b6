"""
Gahoi Sathi — Shortlist model (profiles a member has saved).
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, utcnow


class Shortlist(Base):
    __tablename__ = "shortlists"
    __table_args__ = (
        UniqueConstraint("user_id", "shortlisted_user_id", name="uq_shortlist_pair"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    shortlisted_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    # ── Relationships ──────────────────────────────────────────────
    shortlisted_user: Mapped["User"] = relationship(
        "User", foreign_keys=[shortlisted_user_id], lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Shortlist {self.user_id} -> {self.shortlisted_user_id}>"
