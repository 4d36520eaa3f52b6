"""
Gahoi Sathi — Shortlist API
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_shortlist_service
from app.database import get_db
from app.models.shortlist import Shortlist
from app.models.user import User
from app.schemas.shortlist import (
    ShortlistAdd,
    ShortlistCheckResponse,
    ShortlistListResponse,
    ShortlistResponse,
)

logger = structlog.get_logger("sathi.api.shortlist")

router = APIRouter()


@router.post(
    "/add",
    response_model=ShortlistResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a profile to your shortlist",
)
async def add_to_shortlist(
    payload: ShortlistAdd,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Shortlist:
    return await get_shortlist_service().add(current_user.id, payload.shortlisted_user_id, db)


@router.delete(
    "/remove/{shortlisted_user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a profile from your shortlist",
)
async def remove_from_shortlist(
    shortlisted_user_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    await get_shortlist_service().remove(current_user.id, shortlisted_user_id, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/", response_model=ShortlistListResponse, summary="Your shortlist")
async def my_shortlist(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    entries = await get_shortlist_service().list_shortlist(current_user.id, db)
    return {"shortlist": entries, "total": len(entries)}


@router.get(
    "/check/{shortlisted_user_id}",
    response_model=ShortlistCheckResponse,
    summary="Whether a profile is on your shortlist",
)
async def check_shortlisted(
    shortlisted_user_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return {
        "is_shortlisted": await get_shortlist_service().is_shortlisted(
            current_user.id, shortlisted_user_id, db
        )
    }
