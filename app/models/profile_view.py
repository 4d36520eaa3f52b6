"""
Gahoi Sathi — ProfileView model ("who viewed me").
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, utcnow


class ProfileView(Base):
    __tablename__ = "profile_views"
    __table_args__ = (
        Index("ix_profile_views_pair_viewed_at", "viewer_id", "viewed_user_id", "viewed_at"),
        Index("ix_profile_views_viewed_user", "viewed_user_id", "viewed_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    viewer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    viewed_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    has_messaged: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )

    viewer: Mapped["User"] = relationship(
        "User", foreign_keys=[viewer_id], lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<ProfileView {self.viewer_id} -> {self.viewed_user_id}>"
