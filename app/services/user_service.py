"""
Gahoi Sathi — Profiles, Search & Photos

Owns everything that mutates a ``User`` row after registration: profile
edits, soft / hard deletion, filtered search, the completeness score and
the photo list (upload, delete, set primary).
"""

from __future__ import annotations

import asyncio
import uuid
from datetime import date
from typing import Any

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.models.user import User, UserSession
from app.utils import photos as photo_list
from app.utils.images import process_photo

logger = structlog.get_logger("sathi.user_service")

# ──────────────────────────────────────────────────────────────────────────────
# Constants
# ──────────────────────────────────────────────────────────────────────────────

# Fields a profile needs before it is shown as complete (plus one photo
# and a way to reach the member).
_ESSENTIAL_FIELDS: list[str] = ["name", "gender", "age", "city", "religion"]

# Exact-match search filters (query parameter → column)
_EXACT_FILTERS: dict[str, Any] = {
    "gender": User.gender,
    "religion": User.religion,
    "caste": User.caste,
    "marital_status": User.marital_status,
}

# Case-insensitive substring filters
_FUZZY_FILTERS: dict[str, Any] = {
    "city": User.city,
    "state": User.state,
    "education": User.education,
    "occupation": User.occupation,
}


def age_from_dob(dob: date, today: date | None = None) -> int:
    today = today or date.today()
    had_birthday = (today.month, today.day) >= (dob.month, dob.day)
    return today.year - dob.year - (0 if had_birthday else 1)


def completeness(user: User) -> dict:
    """Score how much of the essential profile is filled in.

    Returns
    -------
    dict
        ``{"percentage": int, "missing_fields": list[str],
        "is_profile_complete": bool}``
    """
    missing = [f for f in _ESSENTIAL_FIELDS if getattr(user, f, None) in (None, "")]
    if not (user.email or user.phone):
        missing.append("contact")
    if not user.photos:
        missing.append("photos")

    total = len(_ESSENTIAL_FIELDS) + 2
    percentage = round(100 * (total - len(missing)) / total)
    return {
        "percentage": percentage,
        "missing_fields": missing,
        "is_profile_complete": not missing,
    }


class UserService:
    """Profile management backed by a storage backend for photos."""

    def __init__(self, storage: Any | None = None) -> None:
        self.storage = storage
        settings = get_settings()
        self.max_photos = settings.MAX_PHOTOS
        self.watermark = settings.APP_NAME

    # ── Profiles ──────────────────────────────────────────────────────────

    async def get_profile(
        self, user_id: uuid.UUID, db: AsyncSession, requester_id: uuid.UUID | None = None
    ) -> User:
        """Load a profile.  Inactive profiles are only visible to their owner."""
        user = await db.get(User, user_id)
        if user is None or (not user.is_active and user_id != requester_id):
            raise NotFoundError("User not found")
        return user

    async def update_profile(
        self,
        user_id: uuid.UUID,
        actor: User,
        data: dict,
        db: AsyncSession,
    ) -> User:
        if actor.id != user_id and not actor.is_admin:
            raise AuthorizationError("Not authorized to update this profile")

        user = await self.get_profile(user_id, db, requester_id=user_id)
        log = logger.bind(user_id=str(user_id), actor_id=str(actor.id))

        for key in ("email", "phone"):
            value = data.get(key)
            if value:
                clash = await db.execute(
                    select(User.id).where(getattr(User, key) == value, User.id != user_id)
                )
                if clash.first() is not None:
                    raise ConflictError(f"{key.capitalize()} already exists")

        if data.get("date_of_birth"):
            data["age"] = age_from_dob(data["date_of_birth"])

        for field, value in data.items():
            setattr(user, field, value)
        user.is_profile_complete = completeness(user)["is_profile_complete"]
        await db.flush()

        log.info("profile_updated", fields=sorted(data))
        return user

    async def delete_profile(self, user_id: uuid.UUID, db: AsyncSession, hard: bool = False) -> None:
        """Deactivate a profile, or remove it outright with ``hard=True``."""
        user = await self.get_profile(user_id, db, requester_id=user_id)
        await db.execute(
            update(UserSession).where(UserSession.user_id == user_id).values(is_active=False)
        )

        if hard:
            if self.storage is not None:
                for photo in user.photos or []:
                    await asyncio.to_thread(self.storage.delete_file, photo["url"])
            await db.delete(user)
            logger.info("profile_hard_deleted", user_id=str(user_id))
        else:
            user.is_active = False
            logger.info("profile_deactivated", user_id=str(user_id))
        await db.flush()

    async def search_users(
        self,
        viewer_id: uuid.UUID,
        filters: dict,
        db: AsyncSession,
        limit: int = 20,
        skip: int = 0,
    ) -> dict:
        """Search active members other than ``viewer_id``.

        Supported filters: gender, religion, caste, marital_status (exact);
        city, state, education, occupation (substring); min_age / max_age.
        """
        conditions = [User.is_active.is_(True), User.id != viewer_id]
        for key, column in _EXACT_FILTERS.items():
            if filters.get(key):
                conditions.append(column == filters[key])
        for key, column in _FUZZY_FILTERS.items():
            if filters.get(key):
                conditions.append(column.ilike(f"%{filters[key]}%"))
        if filters.get("min_age") is not None:
            conditions.append(User.age >= filters["min_age"])
        if filters.get("max_age") is not None:
            conditions.append(User.age <= filters["max_age"])

        total = (
            await db.execute(select(func.count()).select_from(User).where(*conditions))
        ).scalar_one()
        result = await db.execute(
            select(User)
            .where(*conditions)
            .order_by(User.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return {
            "users": list(result.scalars().all()),
            "total": total,
            "limit": limit,
            "skip": skip,
        }

    # ── Photos ────────────────────────────────────────────────────────────

    async def add_photos(
        self, user: User, uploads: list[bytes], db: AsyncSession
    ) -> list[dict]:
        """Process and store uploaded images, then append them to the profile.

        The photo limit is checked before anything is written to storage.
        """
        log = logger.bind(user_id=str(user.id), count=len(uploads))
        current = len(user.photos or [])
        if not uploads:
            raise ValidationError("No photos uploaded")
        if current + len(uploads) > self.max_photos:
            raise ValidationError(
                f"Maximum {self.max_photos} photos allowed. You have {current} photos."
            )

        urls: list[str] = []
        for raw in uploads:
            processed = await asyncio.to_thread(process_photo, raw, self.watermark)
            filename = f"{user.id}-{uuid.uuid4().hex}.jpg"
            stored = await asyncio.to_thread(
                self.storage.upload_file, processed, filename, owner_id=user.id
            )
            urls.append(stored["url"])

        user.photos = photo_list.add_photos(user.photos, urls, self.max_photos)
        user.is_profile_complete = completeness(user)["is_profile_complete"]
        await db.flush()
        log.info("photos_added", total=len(user.photos))
        return user.photos

    async def delete_photo(self, user: User, index: int, db: AsyncSession) -> list[dict]:
        remaining, removed = photo_list.remove_photo(user.photos, index)
        if self.storage is not None:
            await asyncio.to_thread(self.storage.delete_file, removed["url"])
        user.photos = remaining
        user.is_profile_complete = completeness(user)["is_profile_complete"]
        await db.flush()
        logger.info("photo_deleted", user_id=str(user.id), index=index)
        return user.photos

    async def set_primary_photo(self, user: User, index: int, db: AsyncSession) -> list[dict]:
        user.photos = photo_list.set_primary(user.photos, index)
        await db.flush()
        logger.info("photo_primary_set", user_id=str(user.id), index=index)
        return user.photos
