"""
Gahoi Sathi — Profile View Tracking

Records "who viewed my profile" events.  Self-views are ignored and a
repeat view by the same viewer inside the dedup window returns the
existing record without notifying again.
"""

from __future__ import annotations

import uuid
from datetime import timedelta
from typing import Any

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.database import utcnow
from app.errors import NotFoundError
from app.models.notification import TYPE_PROFILE_VIEW
from app.models.profile_view import ProfileView
from app.models.user import User

logger = structlog.get_logger("sathi.profile_view_service")


class ProfileViewService:
    def __init__(self, notification_service: Any | None = None) -> None:
        self.notification_service = notification_service
        self.dedup_window = timedelta(hours=get_settings().PROFILE_VIEW_DEDUP_HOURS)

    async def track_view(
        self, viewer_id: uuid.UUID, viewed_user_id: uuid.UUID, db: AsyncSession
    ) -> ProfileView | None:
        """Record a view of ``viewed_user_id`` by ``viewer_id``.

        Returns ``None`` for self-views and the existing row when the same
        viewer already viewed within the dedup window.
        """
        if viewer_id == viewed_user_id:
            return None

        log = logger.bind(viewer_id=str(viewer_id), viewed_user_id=str(viewed_user_id))

        viewed = await db.get(User, viewed_user_id)
        if viewed is None or not viewed.is_active:
            raise NotFoundError("User not found")

        cutoff = utcnow() - self.dedup_window
        result = await db.execute(
            select(ProfileView)
            .where(
                ProfileView.viewer_id == viewer_id,
                ProfileView.viewed_user_id == viewed_user_id,
                ProfileView.viewed_at >= cutoff,
            )
            .order_by(ProfileView.viewed_at.desc())
            .limit(1)
        )
        recent = result.scalar_one_or_none()
        if recent is not None:
            log.info("profile_view_deduplicated")
            return recent

        viewer = await db.get(User, viewer_id)
        if viewer is None:
            raise NotFoundError("User not found")

        view = ProfileView(viewer=viewer, viewed_user_id=viewed_user_id, viewed_at=utcnow())
        db.add(view)
        await db.flush()
        log.info("profile_view_tracked", view_id=str(view.id))

        if self.notification_service is not None:
            await self.notification_service.notify(
                viewed_user_id,
                TYPE_PROFILE_VIEW,
                "Profile Viewed",
                f"{viewer.name} viewed your profile",
                db,
                related_user_id=viewer_id,
                related_id=view.id,
                metadata={"viewer_name": viewer.name},
            )
        return view

    async def list_views(
        self, user_id: uuid.UUID, db: AsyncSession, limit: int = 20, skip: int = 0
    ) -> list[ProfileView]:
        result = await db.execute(
            select(ProfileView)
            .where(ProfileView.viewed_user_id == user_id)
            .order_by(ProfileView.viewed_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def view_count(self, user_id: uuid.UUID, db: AsyncSession) -> int:
        result = await db.execute(
            select(func.count())
            .select_from(ProfileView)
            .where(ProfileView.viewed_user_id == user_id)
        )
        return result.scalar_one()

    async def mark_as_messaged(
        self, viewer_id: uuid.UUID, viewed_user_id: uuid.UUID, db: AsyncSession
    ) -> int:
        result = await db.execute(
            update(ProfileView)
            .where(
                ProfileView.viewer_id == viewer_id,
                ProfileView.viewed_user_id == viewed_user_id,
                ProfileView.has_messaged.is_(False),
            )
            .values(has_messaged=True)
        )
        return result.rowcount or 0
