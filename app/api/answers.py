"""
Gahoi Sathi — Community Answers API
"""

from __future__ import annotations

import uuid
from typing import Literal

import structlog
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_answer_service, get_current_user
from app.database import get_db
from app.models.question import Answer
from app.models.user import User
from app.schemas.question import AnswerCreate, AnswerResponse, VoteRequest, VoteResponse

logger = structlog.get_logger("sathi.api.answers")

router = APIRouter()


@router.get("/question/{question_id}", response_model=list[AnswerResponse], summary="Answers to a question")
async def list_answers(
    question_id: uuid.UUID,
    sort_by: Literal["upvotes", "created_at"] = Query("upvotes"),
    limit: int = Query(50, ge=1, le=100),
    skip: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> list[Answer]:
    return await get_answer_service().list_for_question(
        question_id, db, sort_by=sort_by, limit=limit, skip=skip
    )


@router.post(
    "/question/{question_id}",
    response_model=AnswerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Answer a question",
)
async def create_answer(
    question_id: uuid.UUID,
    payload: AnswerCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Answer:
    return await get_answer_service().create(question_id, current_user.id, payload.content, db)


@router.put("/{answer_id}", response_model=AnswerResponse, summary="Edit your answer")
async def update_answer(
    answer_id: uuid.UUID,
    payload: AnswerCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Answer:
    return await get_answer_service().update(answer_id, current_user.id, payload.content, db)


@router.delete("/{answer_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete your answer")
async def delete_answer(
    answer_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    await get_answer_service().delete(answer_id, current_user.id, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{answer_id}/accept", response_model=AnswerResponse, summary="Accept an answer")
async def accept_answer(
    answer_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Answer:
    return await get_answer_service().accept(answer_id, current_user.id, db)


@router.post("/{answer_id}/vote", response_model=VoteResponse, summary="Vote on an answer")
async def vote_answer(
    answer_id: uuid.UUID,
    payload: VoteRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await get_answer_service().vote(answer_id, current_user.id, payload.vote_type, db)
