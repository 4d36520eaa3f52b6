"""
Gahoi Sathi — Interest Lifecycle

An interest is a directed request from one user to another:

    pending ──accept──▶ accepted   (terminal)
       └─────reject──▶ rejected   (terminal)

At most one interest exists per ordered (from, to) pair, enforced by the
``uq_interest_pair`` constraint.  The pending → decided transition is a
single conditional ``UPDATE … WHERE status = 'pending'`` so that two
concurrent responses cannot both succeed.
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import utcnow
from app.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.models.interest import STATUS_ACCEPTED, STATUS_PENDING, STATUS_REJECTED, Interest
from app.models.notification import TYPE_INTEREST_ACCEPTED, TYPE_INTEREST_RECEIVED
from app.models.user import User

logger = structlog.get_logger("sathi.interest_service")

# ──────────────────────────────────────────────────────────────────────────────
# Constants
# ──────────────────────────────────────────────────────────────────────────────

_DECISIONS: dict[str, str] = {
    "accept": STATUS_ACCEPTED,
    "reject": STATUS_REJECTED,
}


class InterestService:
    """Send and answer interests between users."""

    def __init__(self, notification_service: Any | None = None) -> None:
        self.notification_service = notification_service

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _active_user(self, user_id: uuid.UUID, db: AsyncSession) -> User:
        user = await db.get(User, user_id)
        if user is None or not user.is_active:
            raise NotFoundError("User not found")
        return user

    async def _find_pair(
        self, from_user_id: uuid.UUID, to_user_id: uuid.UUID, db: AsyncSession
    ) -> Interest | None:
        result = await db.execute(
            select(Interest).where(
                Interest.from_user_id == from_user_id,
                Interest.to_user_id == to_user_id,
            )
        )
        return result.scalar_one_or_none()

    # ── Public API ────────────────────────────────────────────────────────

    async def send_interest(
        self, from_user_id: uuid.UUID, to_user_id: uuid.UUID, db: AsyncSession
    ) -> Interest:
        """Create a pending interest and notify the recipient.

        Raises
        ------
        ValidationError
            Sending an interest to yourself.
        NotFoundError
            Either user is missing or inactive.
        ConflictError
            An interest already exists for the pair, or the recipient does
            not accept interests.
        """
        log = logger.bind(from_user_id=str(from_user_id), to_user_id=str(to_user_id))

        if from_user_id == to_user_id:
            raise ValidationError("Cannot send interest to yourself")

        from_user = await self._active_user(from_user_id, db)
        to_user = await self._active_user(to_user_id, db)

        if not to_user.accepts_interests:
            log.info("interest_blocked_by_privacy")
            raise ConflictError("This user is not accepting interests")

        if await self._find_pair(from_user_id, to_user_id, db) is not None:
            log.info("interest_duplicate")
            raise ConflictError("Interest already sent")

        interest = Interest(from_user=from_user, to_user=to_user, status=STATUS_PENDING)
        db.add(interest)
        try:
            await db.flush()
        except IntegrityError as exc:
            log.info("interest_duplicate_race")
            raise ConflictError("Interest already sent") from exc

        log.info("interest_sent", interest_id=str(interest.id))

        if self.notification_service is not None:
            await self.notification_service.notify(
                to_user_id,
                TYPE_INTEREST_RECEIVED,
                "Interest Received",
                f"{from_user.name} sent you an interest",
                db,
                related_user_id=from_user_id,
                related_id=interest.id,
                metadata={"interest_status": STATUS_PENDING},
            )
        return interest

    async def respond_to_interest(
        self,
        to_user_id: uuid.UUID,
        from_user_id: uuid.UUID,
        decision: str,
        db: AsyncSession,
    ) -> Interest:
        """Accept or reject the interest ``from_user_id`` sent to ``to_user_id``."""
        interest = await self._find_pair(from_user_id, to_user_id, db)
        if interest is None:
            raise NotFoundError("Interest not found")
        return await self._decide(interest, to_user_id, decision, db)

    async def respond_by_id(
        self,
        interest_id: uuid.UUID,
        caller_id: uuid.UUID,
        decision: str,
        db: AsyncSession,
    ) -> Interest:
        interest = await db.get(Interest, interest_id)
        if interest is None:
            raise NotFoundError("Interest not found")
        return await self._decide(interest, caller_id, decision, db)

    async def _decide(
        self,
        interest: Interest,
        caller_id: uuid.UUID,
        decision: str,
        db: AsyncSession,
    ) -> Interest:
        if decision not in _DECISIONS:
            raise ValidationError('Decision must be either "accept" or "reject"')
        if interest.to_user_id != caller_id:
            raise AuthorizationError("Only the recipient can respond to this interest")

        new_status = _DECISIONS[decision]
        log = logger.bind(interest_id=str(interest.id), decision=decision)

        result = await db.execute(
            update(Interest)
            .where(Interest.id == interest.id, Interest.status == STATUS_PENDING)
            .values(status=new_status, responded_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            log.info("interest_not_pending", current_status=interest.status)
            raise NotFoundError("No pending interest to respond to")

        await db.refresh(interest)
        log.info("interest_decided", status=new_status)

        if new_status == STATUS_ACCEPTED and self.notification_service is not None:
            responder = await db.get(User, caller_id)
            await self.notification_service.notify(
                interest.from_user_id,
                TYPE_INTEREST_ACCEPTED,
                "Interest Accepted",
                f"{responder.name if responder else 'Someone'} accepted your interest",
                db,
                related_user_id=caller_id,
                related_id=interest.id,
                metadata={"interest_status": STATUS_ACCEPTED},
            )
        return interest

    async def list_incoming(self, user_id: uuid.UUID, db: AsyncSession) -> list[Interest]:
        """Pending interests received by ``user_id``, newest first."""
        result = await db.execute(
            select(Interest)
            .where(Interest.to_user_id == user_id, Interest.status == STATUS_PENDING)
            .order_by(Interest.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_outgoing(self, user_id: uuid.UUID, db: AsyncSession) -> list[Interest]:
        """Every interest sent by ``user_id`` regardless of status, newest first."""
        result = await db.execute(
            select(Interest)
            .where(Interest.from_user_id == user_id)
            .order_by(Interest.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_accepted(self, user_id: uuid.UUID, db: AsyncSession) -> list[Interest]:
        result = await db.execute(
            select(Interest)
            .where(
                or_(Interest.from_user_id == user_id, Interest.to_user_id == user_id),
                Interest.status == STATUS_ACCEPTED,
            )
            .order_by(Interest.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_status(
        self, user_id: uuid.UUID, other_user_id: uuid.UUID, db: AsyncSession
    ) -> dict[str, Interest | None]:
        return {
            "sent": await self._find_pair(user_id, other_user_id, db),
            "received": await self._find_pair(other_user_id, user_id, db),
        }
