"""
Gahoi Sathi — Direct Messaging

Messages between two users share a ``conversation_id`` derived from the
unordered pair.  Content is immutable once stored; only the receiver can
move ``is_read`` from false to true.

Side effects of sending a message:
  1. Any profile view by the sender of the receiver is flagged
     ``has_messaged``.
  2. A ``message_received`` notification (with a short preview) is raised
     for the receiver.
  3. A ``new-message`` realtime hint goes to both participants once the
     transaction commits.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.database import after_commit, utcnow
from app.errors import AuthorizationError, NotFoundError, ValidationError
from app.models.message import Message
from app.models.notification import TYPE_MESSAGE_RECEIVED
from app.models.user import User
from app.services.realtime_service import EVENT_NEW_MESSAGE
from app.utils.conversation import conversation_id

logger = structlog.get_logger("sathi.message_service")

# ──────────────────────────────────────────────────────────────────────────────
# Constants
# ──────────────────────────────────────────────────────────────────────────────

_PREVIEW_LENGTH = 100
DEFAULT_PAGE_SIZE = 50
DEFAULT_INBOX_SIZE = 20


class MessageService:
    """Send, page and mark-read direct messages."""

    def __init__(
        self,
        notification_service: Any | None = None,
        profile_view_service: Any | None = None,
        realtime_hub: Any | None = None,
    ) -> None:
        self.notification_service = notification_service
        self.profile_view_service = profile_view_service
        self.realtime_hub = realtime_hub
        self.max_length = get_settings().MESSAGE_MAX_LENGTH

    async def send_message(
        self,
        sender_id: uuid.UUID,
        receiver_id: uuid.UUID,
        content: str,
        db: AsyncSession,
    ) -> Message:
        """Persist a message from ``sender_id`` to ``receiver_id``.

        Raises
        ------
        ValidationError
            Empty or over-long content, a message to yourself, or a
            receiver who does not accept messages.
        NotFoundError
            Either user is missing or inactive.
        """
        log = logger.bind(sender_id=str(sender_id), receiver_id=str(receiver_id))

        text = content or ""
        if not text.strip():
            raise ValidationError("Message content is required")
        if len(text) > self.max_length:
            raise ValidationError(
                f"Message content must be at most {self.max_length} characters"
            )
        if sender_id == receiver_id:
            raise ValidationError("Cannot send a message to yourself")

        sender = await db.get(User, sender_id)
        receiver = await db.get(User, receiver_id)
        if sender is None or receiver is None or not sender.is_active or not receiver.is_active:
            raise NotFoundError("User not found")
        if not receiver.accepts_messages:
            raise ValidationError("This user is not accepting messages")

        message = Message(
            sender_id=sender_id,
            receiver_id=receiver_id,
            conversation_id=conversation_id(sender_id, receiver_id),
            content=text,
        )
        db.add(message)
        await db.flush()
        log.info("message_sent", message_id=str(message.id), length=len(text))

        if self.profile_view_service is not None:
            await self.profile_view_service.mark_as_messaged(sender_id, receiver_id, db)

        if self.notification_service is not None:
            await self.notification_service.notify(
                receiver_id,
                TYPE_MESSAGE_RECEIVED,
                "New Message",
                f"{sender.name} sent you a message",
                db,
                related_user_id=sender_id,
                related_id=message.id,
                metadata={"message_preview": text[:_PREVIEW_LENGTH]},
            )

        if self.realtime_hub is not None:
            hint = {
                "id": str(message.id),
                "conversation_id": message.conversation_id,
                "sender_id": str(sender_id),
                "receiver_id": str(receiver_id),
                "created_at": message.created_at.isoformat(),
            }

            async def emit_hint() -> None:
                try:
                    for participant in (receiver_id, sender_id):
                        await self.realtime_hub.emit_to_user(participant, EVENT_NEW_MESSAGE, hint)
                except Exception as exc:
                    log.warning("message_hint_failed", error=str(exc))

            after_commit(db, emit_hint)

        return message

    async def get_conversation(
        self,
        user_id: uuid.UUID,
        other_user_id: uuid.UUID,
        db: AsyncSession,
        limit: int = DEFAULT_PAGE_SIZE,
        skip: int = 0,
        before: datetime | None = None,
        before_id: uuid.UUID | None = None,
    ) -> dict:
        """Newest-first page of the conversation between two users.

        Returns
        -------
        dict
            ``{"messages": [...], "has_more": bool, "next_cursor": datetime | None,
            "next_cursor_id": UUID | None}``.  Pass ``next_cursor`` back as
            ``before`` and ``next_cursor_id`` as ``before_id`` to fetch older
            messages; ``before`` alone filters on the timestamp only.
        """
        if await db.get(User, other_user_id) is None:
            raise NotFoundError("User not found")

        stmt = select(Message).where(
            Message.conversation_id == conversation_id(user_id, other_user_id)
        )
        if before is not None and before_id is not None:
            # Keyset on (created_at, id), matching the sort order below.
            stmt = stmt.where(
                or_(
                    Message.created_at < before,
                    and_(Message.created_at == before, Message.id < before_id),
                )
            )
        elif before is not None:
            stmt = stmt.where(Message.created_at < before)
        stmt = (
            stmt.order_by(Message.created_at.desc(), Message.id.desc())
            .offset(skip)
            .limit(limit + 1)
        )
        result = await db.execute(stmt)
        rows = list(result.scalars().all())

        has_more = len(rows) > limit
        messages = rows[:limit]
        last = messages[-1] if has_more and messages else None
        return {
            "messages": messages,
            "has_more": has_more,
            "next_cursor": last.created_at if last is not None else None,
            "next_cursor_id": last.id if last is not None else None,
        }

    async def mark_conversation_read(
        self, user_id: uuid.UUID, other_user_id: uuid.UUID, db: AsyncSession
    ) -> int:
        """Mark every unread message from ``other_user_id`` to ``user_id`` as read."""
        result = await db.execute(
            update(Message)
            .where(
                Message.conversation_id == conversation_id(user_id, other_user_id),
                Message.receiver_id == user_id,
                Message.is_read.is_(False),
            )
            .values(is_read=True, read_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        count = result.rowcount or 0
        logger.info(
            "conversation_marked_read",
            user_id=str(user_id),
            other_user_id=str(other_user_id),
            count=count,
        )
        return count

    async def mark_message_read(
        self, message_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession
    ) -> Message:
        message = await db.get(Message, message_id)
        if message is None:
            raise NotFoundError("Message not found")
        if message.receiver_id != user_id:
            raise AuthorizationError("Only the receiver can mark a message as read")
        if not message.is_read:
            message.is_read = True
            message.read_at = utcnow()
            await db.flush()
        return message

    async def list_conversations(
        self,
        user_id: uuid.UUID,
        db: AsyncSession,
        limit: int = DEFAULT_INBOX_SIZE,
        skip: int = 0,
    ) -> list[dict]:
        """One entry per counterpart, most recent activity first.

        Each entry carries the latest message and the number of unread
        messages *from* that counterpart.
        """
        ranked = (
            select(
                Message.id.label("id"),
                func.row_number()
                .over(
                    partition_by=Message.conversation_id,
                    order_by=(Message.created_at.desc(), Message.id.desc()),
                )
                .label("rn"),
            )
            .where(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
            .subquery()
        )
        result = await db.execute(
            select(Message)
            .join(ranked, Message.id == ranked.c.id)
            .where(ranked.c.rn == 1)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .offset(skip)
            .limit(limit)
        )
        latest = list(result.scalars().all())

        unread_result = await db.execute(
            select(Message.sender_id, func.count())
            .where(Message.receiver_id == user_id, Message.is_read.is_(False))
            .group_by(Message.sender_id)
        )
        unread_by_sender = {sender: count for sender, count in unread_result.all()}

        conversations = []
        for message in latest:
            other = message.receiver if message.sender_id == user_id else message.sender
            conversations.append(
                {
                    "conversation_id": message.conversation_id,
                    "other_user": other,
                    "last_message": message,
                    "unread_count": unread_by_sender.get(other.id, 0),
                }
            )
        return conversations

    async def unread_count(self, user_id: uuid.UUID, db: AsyncSession) -> int:
        result = await db.execute(
            select(func.count())
            .select_from(Message)
            .where(Message.receiver_id == user_id, Message.is_read.is_(False))
        )
        return result.scalar_one()
