"""
Gahoi Sathi — Shortlist

Members keep a private shortlist of profiles they are interested in.
Adding someone notifies them; removing is silent.  Each (owner,
shortlisted) pair appears at most once, enforced by ``uq_shortlist_pair``.
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.notification import TYPE_SHORTLIST
from app.models.shortlist import Shortlist
from app.models.user import User

logger = structlog.get_logger("sathi.shortlist_service")


class ShortlistService:
    def __init__(self, notification_service: Any | None = None) -> None:
        self.notification_service = notification_service

    async def add(
        self, user_id: uuid.UUID, shortlisted_user_id: uuid.UUID, db: AsyncSession
    ) -> Shortlist:
        """Add ``shortlisted_user_id`` to the shortlist of ``user_id``.

        Raises
        ------
        NotFoundError
            Either user is missing or inactive.
        ValidationError
            Shortlisting yourself.
        ConflictError
            The profile is already on the shortlist.
        """
        log = logger.bind(user_id=str(user_id), shortlisted_user_id=str(shortlisted_user_id))

        user = await db.get(User, user_id)
        target = await db.get(User, shortlisted_user_id)
        if user is None or target is None or not user.is_active or not target.is_active:
            raise NotFoundError("User not found")
        if user_id == shortlisted_user_id:
            raise ValidationError("Cannot shortlist yourself")

        if await self.is_shortlisted(user_id, shortlisted_user_id, db):
            raise ConflictError("User already in shortlist")

        entry = Shortlist(user_id=user_id, shortlisted_user=target)
        db.add(entry)
        try:
            await db.flush()
        except IntegrityError as exc:
            log.info("shortlist_duplicate_race")
            raise ConflictError("User already in shortlist") from exc
        log.info("shortlist_added", shortlist_id=str(entry.id))

        if self.notification_service is not None:
            await self.notification_service.notify(
                shortlisted_user_id,
                TYPE_SHORTLIST,
                "Added to Shortlist",
                f"{user.name} added you to their shortlist",
                db,
                related_user_id=user_id,
                related_id=entry.id,
            )
        return entry

    async def remove(
        self, user_id: uuid.UUID, shortlisted_user_id: uuid.UUID, db: AsyncSession
    ) -> None:
        result = await db.execute(
            delete(Shortlist).where(
                Shortlist.user_id == user_id,
                Shortlist.shortlisted_user_id == shortlisted_user_id,
            )
        )
        if not result.rowcount:
            raise NotFoundError("User not in shortlist")
        logger.info(
            "shortlist_removed", user_id=str(user_id), shortlisted_user_id=str(shortlisted_user_id)
        )

    async def list_shortlist(self, user_id: uuid.UUID, db: AsyncSession) -> list[Shortlist]:
        """Newest first; profiles that have since been deactivated are left out."""
        result = await db.execute(
            select(Shortlist)
            .join(User, User.id == Shortlist.shortlisted_user_id)
            .where(Shortlist.user_id == user_id, User.is_active.is_(True))
            .order_by(Shortlist.created_at.desc())
        )
        return list(result.scalars().all())

    async def is_shortlisted(
        self, user_id: uuid.UUID, shortlisted_user_id: uuid.UUID, db: AsyncSession
    ) -> bool:
        result = await db.execute(
            select(func.count())
            .select_from(Shortlist)
            .where(
                Shortlist.user_id == user_id,
                Shortlist.shortlisted_user_id == shortlisted_user_id,
            )
        )
        return result.scalar_one() > 0
