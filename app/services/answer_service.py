"""
Gahoi Sathi — Community Answers

Answers belong to a question.  Creating or deleting one keeps the
question's ``answers_count`` in step; the question author may accept
exactly one answer, which marks the question solved.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import AuthorizationError, NotFoundError
from app.models.question import Answer, Question
from app.models.user import User
from app.services.question_service import apply_vote

logger = structlog.get_logger("sathi.answer_service")

_SORT_COLUMNS = {
    "upvotes": Answer.upvotes,
    "created_at": Answer.created_at,
}


class AnswerService:
    async def _question(self, question_id: uuid.UUID, db: AsyncSession) -> Question:
        question = await db.get(Question, question_id)
        if question is None or not question.is_active:
            raise NotFoundError("Question not found")
        return question

    async def _answer(self, answer_id: uuid.UUID, db: AsyncSession) -> Answer:
        answer = await db.get(Answer, answer_id)
        if answer is None or not answer.is_active:
            raise NotFoundError("Answer not found")
        return answer

    async def _bump_answers_count(self, question_id: uuid.UUID, delta: int, db: AsyncSession) -> None:
        await db.execute(
            update(Question)
            .where(Question.id == question_id)
            .values(answers_count=Question.answers_count + delta)
            .execution_options(synchronize_session=False)
        )

    async def create(
        self, question_id: uuid.UUID, author_id: uuid.UUID, content: str, db: AsyncSession
    ) -> Answer:
        await self._question(question_id, db)
        answer = Answer(
            question_id=question_id, author=await db.get(User, author_id), content=content
        )
        db.add(answer)
        await db.flush()
        await self._bump_answers_count(question_id, 1, db)
        logger.info("answer_created", answer_id=str(answer.id), question_id=str(question_id))
        return answer

    async def list_for_question(
        self,
        question_id: uuid.UUID,
        db: AsyncSession,
        sort_by: str = "upvotes",
        limit: int = 50,
        skip: int = 0,
    ) -> list[Answer]:
        """Active answers; the accepted answer always comes first."""
        await self._question(question_id, db)
        column = _SORT_COLUMNS.get(sort_by, Answer.upvotes)
        result = await db.execute(
            select(Answer)
            .where(Answer.question_id == question_id, Answer.is_active.is_(True))
            .order_by(Answer.is_accepted.desc(), column.desc(), Answer.created_at.asc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def update(
        self, answer_id: uuid.UUID, user_id: uuid.UUID, content: str, db: AsyncSession
    ) -> Answer:
        answer = await self._answer(answer_id, db)
        if answer.author_id != user_id:
            raise AuthorizationError("Not authorized to update this answer")
        answer.content = content
        await db.flush()
        return answer

    async def delete(self, answer_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> None:
        answer = await self._answer(answer_id, db)
        if answer.author_id != user_id:
            raise AuthorizationError("Not authorized to delete this answer")
        answer.is_active = False
        if answer.is_accepted:
            answer.is_accepted = False
            await db.execute(
                update(Question)
                .where(Question.id == answer.question_id)
                .values(is_solved=False, solved_answer_id=None)
                .execution_options(synchronize_session=False)
            )
        await db.flush()
        await self._bump_answers_count(answer.question_id, -1, db)
        logger.info("answer_deleted", answer_id=str(answer_id))

    async def accept(self, answer_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Answer:
        """Accept ``answer_id`` on behalf of the question author."""
        answer = await self._answer(answer_id, db)
        question = await self._question(answer.question_id, db)
        if question.author_id != user_id:
            raise AuthorizationError("Only question author can accept answers")

        await db.execute(
            update(Answer)
            .where(Answer.question_id == question.id, Answer.id != answer_id)
            .values(is_accepted=False)
            .execution_options(synchronize_session=False)
        )
        answer.is_accepted = True
        question.is_solved = True
        question.solved_answer_id = answer.id
        await db.flush()
        logger.info("answer_accepted", answer_id=str(answer_id), question_id=str(question.id))
        return answer

    async def vote(
        self, answer_id: uuid.UUID, user_id: uuid.UUID, vote_type: str, db: AsyncSession
    ) -> dict:
        await self._answer(answer_id, db)
        current = await apply_vote(Answer, "answer", answer_id, user_id, vote_type, db)
        answer = await db.get(Answer, answer_id, populate_existing=True)
        return {"upvotes": answer.upvotes, "downvotes": answer.downvotes, "user_vote": current}
