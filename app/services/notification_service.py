"""
Gahoi Sathi — Notification Fan-out

Every domain event that concerns a user (profile view, interest received
or accepted, new message, admin broadcast) becomes one ``Notification``
row.  After the row is flushed the service makes a best-effort attempt to
deliver a browser push, and queues a realtime hint that is sent once the
transaction commits; neither can fail the write.
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import after_commit, utcnow
from app.errors import NotFoundError, ValidationError
from app.models.notification import NOTIFICATION_TYPES, TYPE_ADMIN, Notification
from app.models.user import User
from app.services.realtime_service import EVENT_NOTIFICATION

logger = structlog.get_logger("sathi.notification_service")


class NotificationService:
    """Creates, lists and updates notifications for a single user."""

    def __init__(self, push_service: Any | None = None, realtime_hub: Any | None = None) -> None:
        self.push_service = push_service
        self.realtime_hub = realtime_hub

    async def notify(
        self,
        user_id: uuid.UUID,
        notification_type: str,
        title: str,
        message: str,
        db: AsyncSession,
        related_user_id: uuid.UUID | None = None,
        related_id: uuid.UUID | None = None,
        metadata: dict | None = None,
    ) -> Notification:
        """Persist a notification and fire push / realtime hints.

        Parameters
        ----------
        user_id:
            Recipient.
        notification_type:
            One of ``NOTIFICATION_TYPES``.
        related_user_id, related_id:
            The other user and the entity (interest, message, view) the
            notification refers to.
        """
        if notification_type not in NOTIFICATION_TYPES:
            raise ValidationError(f"Unknown notification type {notification_type!r}")

        notification = Notification(
            user_id=user_id,
            type=notification_type,
            title=title,
            message=message,
            related_user_id=related_user_id,
            related_id=related_id,
            metadata_=metadata or {},
        )
        db.add(notification)
        await db.flush()

        log = logger.bind(user_id=str(user_id), notification_id=str(notification.id))
        log.info("notification_created", type=notification_type)

        if self.push_service is not None:
            try:
                await self.push_service.send_notification_push(notification, db)
            except Exception as exc:
                log.warning("notification_push_failed", error=str(exc))

        if self.realtime_hub is not None:
            hint = {
                "id": str(notification.id),
                "type": notification_type,
                "title": title,
                "message": message,
                "related_user_id": str(related_user_id) if related_user_id else None,
            }

            async def emit_hint() -> None:
                try:
                    await self.realtime_hub.emit_to_user(user_id, EVENT_NOTIFICATION, hint)
                except Exception as exc:
                    log.warning("notification_hint_failed", error=str(exc))

            after_commit(db, emit_hint)

        return notification

    async def list_for_user(
        self,
        user_id: uuid.UUID,
        db: AsyncSession,
        only_unread: bool = False,
        notification_type: str | None = None,
        limit: int = 20,
        skip: int = 0,
    ) -> list[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if only_unread:
            stmt = stmt.where(Notification.is_read.is_(False))
        if notification_type:
            stmt = stmt.where(Notification.type == notification_type)
        stmt = (
            stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def unread_count(self, user_id: uuid.UUID, db: AsyncSession) -> int:
        result = await db.execute(
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        )
        return result.scalar_one()

    async def mark_read(
        self, notification_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession
    ) -> Notification:
        result = await db.execute(
            select(Notification).where(
                Notification.id == notification_id, Notification.user_id == user_id
            )
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise NotFoundError("Notification not found")
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = utcnow()
            await db.flush()
        return notification

    async def mark_all_read(self, user_id: uuid.UUID, db: AsyncSession) -> int:
        result = await db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True, read_at=utcnow())
        )
        logger.info("notifications_marked_read", user_id=str(user_id), count=result.rowcount)
        return result.rowcount or 0

    async def delete(self, notification_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> None:
        result = await db.execute(
            delete(Notification).where(
                Notification.id == notification_id, Notification.user_id == user_id
            )
        )
        if not result.rowcount:
            raise NotFoundError("Notification not found")

    async def broadcast_admin(
        self,
        title: str,
        message: str,
        db: AsyncSession,
        metadata: dict | None = None,
    ) -> int:
        """Insert one ``admin`` notification per active user in a single batch.

        Returns the number of recipients.  Push is not sent for broadcasts.
        """
        result = await db.execute(select(User.id).where(User.is_active.is_(True)))
        user_ids = list(result.scalars().all())
        if not user_ids:
            return 0

        now = utcnow()
        rows = [
            {
                "id": uuid.uuid4(),
                "user_id": uid,
                "type": TYPE_ADMIN,
                "title": title,
                "message": message,
                "is_read": False,
                "is_admin_notification": True,
                "metadata_": metadata or {},
                "created_at": now,
            }
            for uid in user_ids
        ]
        await db.execute(insert(Notification), rows)
        logger.info("admin_broadcast_sent", recipients=len(rows))
        return len(rows)
