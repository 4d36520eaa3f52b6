"""
Gahoi Sathi — Community Questions

Questions are posted by members, browsed with category / text filters and
voted on.  Voting follows toggle semantics shared with answers:

  * no previous vote          → record it, bump that counter
  * same vote again           → remove it, decrement that counter
  * opposite vote             → switch it, move one count across
"""

from __future__ import annotations

import math
import uuid

import structlog
from sqlalchemy import String, cast, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import AuthorizationError, NotFoundError, ValidationError
from app.models.question import Question, Vote
from app.models.user import User

logger = structlog.get_logger("sathi.question_service")

# ──────────────────────────────────────────────────────────────────────────────
# Constants
# ──────────────────────────────────────────────────────────────────────────────

VOTE_TYPES = ("upvote", "downvote")

_SORT_COLUMNS = {
    "created_at": Question.created_at,
    "upvotes": Question.upvotes,
    "views": Question.views,
    "answers_count": Question.answers_count,
}

_COUNTER = {"upvote": "upvotes", "downvote": "downvotes"}


async def apply_vote(
    model,
    target_type: str,
    target_id: uuid.UUID,
    user_id: uuid.UUID,
    vote_type: str,
    db: AsyncSession,
) -> str | None:
    """Toggle ``user_id``'s vote on a question or answer.

    Counters are adjusted with ``col = col + delta`` so concurrent voters
    do not overwrite each other.  Returns the caller's vote afterwards
    (``None`` when the vote was removed).
    """
    if vote_type not in VOTE_TYPES:
        raise ValidationError("vote_type must be 'upvote' or 'downvote'")

    result = await db.execute(
        select(Vote).where(
            Vote.user_id == user_id,
            Vote.target_type == target_type,
            Vote.target_id == target_id,
        )
    )
    existing = result.scalar_one_or_none()

    deltas: dict[str, int] = {}
    if existing is None:
        db.add(Vote(user_id=user_id, target_type=target_type, target_id=target_id, vote_type=vote_type))
        deltas[_COUNTER[vote_type]] = 1
        current: str | None = vote_type
    elif existing.vote_type == vote_type:
        await db.delete(existing)
        deltas[_COUNTER[vote_type]] = -1
        current = None
    else:
        deltas[_COUNTER[existing.vote_type]] = -1
        deltas[_COUNTER[vote_type]] = 1
        existing.vote_type = vote_type
        current = vote_type

    await db.flush()
    await db.execute(
        update(model)
        .where(model.id == target_id)
        .values({name: getattr(model, name) + delta for name, delta in deltas.items()})
        .execution_options(synchronize_session=False)
    )
    logger.info(
        "vote_applied",
        target_type=target_type,
        target_id=str(target_id),
        user_id=str(user_id),
        vote=current,
    )
    return current


async def get_user_vote(
    target_type: str, target_id: uuid.UUID, user_id: uuid.UUID | None, db: AsyncSession
) -> str | None:
    if user_id is None:
        return None
    result = await db.execute(
        select(Vote.vote_type).where(
            Vote.user_id == user_id,
            Vote.target_type == target_type,
            Vote.target_id == target_id,
        )
    )
    return result.scalar_one_or_none()


class QuestionService:
    """CRUD, search and voting for community questions."""

    async def _get_active(self, question_id: uuid.UUID, db: AsyncSession) -> Question:
        question = await db.get(Question, question_id)
        if question is None or not question.is_active:
            raise NotFoundError("Question not found")
        return question

    async def _get_owned(
        self, question_id: uuid.UUID, user_id: uuid.UUID, action: str, db: AsyncSession
    ) -> Question:
        question = await self._get_active(question_id, db)
        if question.author_id != user_id:
            raise AuthorizationError(f"Not authorized to {action} this question")
        return question

    async def create(self, author_id: uuid.UUID, data: dict, db: AsyncSession) -> Question:
        question = Question(author=await db.get(User, author_id), **data)
        db.add(question)
        await db.flush()
        logger.info("question_created", question_id=str(question.id), author_id=str(author_id))
        return question

    async def get(
        self, question_id: uuid.UUID, db: AsyncSession, user_id: uuid.UUID | None = None
    ) -> dict:
        """Fetch a question, count the view and return the caller's vote."""
        await self._get_active(question_id, db)
        await db.execute(
            update(Question)
            .where(Question.id == question_id)
            .values(views=Question.views + 1)
            .execution_options(synchronize_session=False)
        )
        question = await db.get(Question, question_id, populate_existing=True)
        return {
            "question": question,
            "user_vote": await get_user_vote("question", question_id, user_id, db),
        }

    async def list(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 20,
        category: str | None = None,
        search: str | None = None,
        sort_by: str = "created_at",
    ) -> dict:
        if sort_by not in _SORT_COLUMNS:
            raise ValidationError(f"Cannot sort questions by {sort_by!r}")

        filters = [Question.is_active.is_(True)]
        if category:
            filters.append(Question.category == category)
        if search:
            pattern = f"%{search.strip()}%"
            filters.append(
                or_(
                    Question.title.ilike(pattern),
                    Question.content.ilike(pattern),
                    cast(Question.tags, String).ilike(pattern),
                )
            )

        total = (
            await db.execute(select(func.count()).select_from(Question).where(*filters))
        ).scalar_one()
        result = await db.execute(
            select(Question)
            .where(*filters)
            .order_by(_SORT_COLUMNS[sort_by].desc(), Question.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return {
            "questions": list(result.scalars().all()),
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit) if limit else 0,
            },
        }

    async def update(
        self, question_id: uuid.UUID, user_id: uuid.UUID, data: dict, db: AsyncSession
    ) -> Question:
        question = await self._get_owned(question_id, user_id, "update", db)
        for field, value in data.items():
            setattr(question, field, value)
        await db.flush()
        logger.info("question_updated", question_id=str(question_id), fields=list(data))
        return question

    async def delete(self, question_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> None:
        question = await self._get_owned(question_id, user_id, "delete", db)
        question.is_active = False
        await db.flush()
        logger.info("question_deleted", question_id=str(question_id))

    async def vote(
        self, question_id: uuid.UUID, user_id: uuid.UUID, vote_type: str, db: AsyncSession
    ) -> dict:
        await self._get_active(question_id, db)
        current = await apply_vote(Question, "question", question_id, user_id, vote_type, db)
        question = await db.get(Question, question_id, populate_existing=True)
        return {"upvotes": question.upvotes, "downvotes": question.downvotes, "user_vote": current}
