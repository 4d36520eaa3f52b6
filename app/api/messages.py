"""
Gahoi Sathi — Messages API

Direct messages, the conversation inbox and read receipts.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_message_service
from app.database import get_db
from app.models.message import Message
from app.models.user import User
from app.schemas.message import (
    ConversationListResponse,
    ConversationPage,
    MarkReadResponse,
    MessageResponse,
    MessageSend,
    UnreadCountResponse,
)

logger = structlog.get_logger("sathi.api.messages")

router = APIRouter()


@router.post(
    "/send",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message",
)
async def send_message(
    payload: MessageSend,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Message:
    return await get_message_service().send_message(
        current_user.id, payload.receiver_id, payload.content, db
    )


@router.get("/conversations", response_model=ConversationListResponse, summary="Inbox")
async def list_conversations(
    limit: int = Query(20, ge=1, le=100),
    skip: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    conversations = await get_message_service().list_conversations(
        current_user.id, db, limit=limit, skip=skip
    )
    return {"conversations": conversations}


@router.get("/conversation/{user_id}", response_model=ConversationPage, summary="Conversation with a member")
async def get_conversation(
    user_id: uuid.UUID,
    limit: int = Query(50, ge=1, le=100),
    skip: int = Query(0, ge=0),
    before: Optional[datetime] = Query(None, description="Only messages older than this timestamp"),
    before_id: Optional[uuid.UUID] = Query(None, description="Tie-breaker id paired with ``before``"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await get_message_service().get_conversation(
        current_user.id, user_id, db, limit=limit, skip=skip, before=before, before_id=before_id
    )


@router.post("/conversation/{user_id}/read", response_model=MarkReadResponse, summary="Mark conversation read")
async def mark_conversation_read(
    user_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    updated = await get_message_service().mark_conversation_read(current_user.id, user_id, db)
    return {"updated": updated}


@router.put("/{message_id}/read", response_model=MessageResponse, summary="Mark one message read")
async def mark_message_read(
    message_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Message:
    return await get_message_service().mark_message_read(message_id, current_user.id, db)


@router.get("/unread-count", response_model=UnreadCountResponse, summary="Unread message count")
async def unread_count(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return {"count": await get_message_service().unread_count(current_user.id, db)}
