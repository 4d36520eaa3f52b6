"""
Gahoi Sathi — Community Questions API
"""

from __future__ import annotations

import uuid
from typing import Literal, Optional

import structlog
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_optional_user, get_question_service
from app.database import get_db
from app.models.question import Question
from app.models.user import User
from app.schemas.question import (
    Category,
    QuestionCreate,
    QuestionDetailResponse,
    QuestionListResponse,
    QuestionResponse,
    QuestionUpdate,
    VoteRequest,
    VoteResponse,
)

logger = structlog.get_logger("sathi.api.questions")

router = APIRouter()


@router.get("/", response_model=QuestionListResponse, summary="Browse questions")
async def list_questions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    category: Optional[Category] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    sort_by: Literal["created_at", "upvotes", "views", "answers_count"] = Query("created_at"),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await get_question_service().list(
        db, page=page, limit=limit, category=category, search=search, sort_by=sort_by
    )


@router.get("/{question_id}", response_model=QuestionDetailResponse, summary="Read a question")
async def get_question(
    question_id: uuid.UUID,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await get_question_service().get(
        question_id, db, user_id=current_user.id if current_user else None
    )


@router.post(
    "/",
    response_model=QuestionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Ask a question",
)
async def create_question(
    payload: QuestionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Question:
    return await get_question_service().create(current_user.id, payload.model_dump(), db)


@router.put("/{question_id}", response_model=QuestionResponse, summary="Edit your question")
async def update_question(
    question_id: uuid.UUID,
    payload: QuestionUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Question:
    return await get_question_service().update(
        question_id, current_user.id, payload.model_dump(exclude_unset=True), db
    )


@router.delete("/{question_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete your question")
async def delete_question(
    question_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    await get_question_service().delete(question_id, current_user.id, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{question_id}/vote", response_model=VoteResponse, summary="Vote on a question")
async def vote_question(
    question_id: uuid.UUID,
    payload: VoteRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await get_question_service().vote(question_id, current_user.id, payload.vote_type, db)
