"""
Gahoi Sathi — User and UserSession models.
"""

import uuid
from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, JSONType, utcnow

GENDERS = ("male", "female", "other")
MARITAL_STATUSES = ("unmarried", "divorced", "widowed", "separated")


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )

    # ── Authentication ─────────────────────────────────────────────
    email: Mapped[str | None] = mapped_column(
        String, unique=True, index=True, nullable=True
    )
    phone: Mapped[str | None] = mapped_column(
        String, unique=True, index=True, nullable=True
    )
    password_hash: Mapped[str | None] = mapped_column(String, nullable=True)

    # ── Basic info ─────────────────────────────────────────────────
    name: Mapped[str] = mapped_column(String, nullable=False)
    gender: Mapped[str] = mapped_column(
        String, nullable=False, comment="male / female / other"
    )
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    marital_status: Mapped[str] = mapped_column(
        String, default="unmarried", server_default="unmarried", nullable=False
    )
    height_cm: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # ── Location & background ──────────────────────────────────────
    city: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    state: Mapped[str | None] = mapped_column(String, nullable=True)
    country: Mapped[str] = mapped_column(
        String, default="India", server_default="India", nullable=False
    )
    religion: Mapped[str | None] = mapped_column(String, nullable=True)
    caste: Mapped[str | None] = mapped_column(String, nullable=True)
    mother_tongue: Mapped[str | None] = mapped_column(String, nullable=True)

    # ── Education & career ─────────────────────────────────────────
    education: Mapped[str | None] = mapped_column(String, nullable=True)
    occupation: Mapped[str | None] = mapped_column(String, nullable=True)
    annual_income: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # ── Profile content ────────────────────────────────────────────
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    photos: Mapped[list | None] = mapped_column(
        JSONType, nullable=True, comment="Array of {url, is_primary, order}"
    )
    preferences: Mapped[dict | None] = mapped_column(
        JSONType, nullable=True, comment="Partner search criteria"
    )
    horoscope_details: Mapped[dict | None] = mapped_column(
        JSONType, nullable=True, comment="{star_sign, rashi, nakshatra}"
    )

    # ── Privacy & status ───────────────────────────────────────────
    accepts_interests: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true", nullable=False
    )
    accepts_messages: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true", nullable=False
    )
    is_profile_complete: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true", nullable=False
    )
    is_admin: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=utcnow, nullable=True
    )

    # ── Relationships ──────────────────────────────────────────────
    sessions: Mapped[list["UserSession"]] = relationship(
        "UserSession", back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User {self.name!r} id={self.id}>"


class UserSession(Base):
    __tablename__ = "sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    token_hash: Mapped[str] = mapped_column(
        String, unique=True, nullable=False, comment="SHA-256 of the bearer token"
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true", nullable=False
    )
    last_seen_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    user: Mapped["User"] = relationship("User", back_populates="sessions")

    def __repr__(self) -> str:
        return f"<UserSession user={self.user_id} active={self.is_active}>"
