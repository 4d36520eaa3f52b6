"""
Gahoi Sathi — Profile Views API
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_profile_view_service
from app.database import get_db
from app.models.user import User
from app.schemas.profile_view import (
    ProfileViewListResponse,
    ProfileViewTrack,
    ProfileViewTrackResponse,
)

logger = structlog.get_logger("sathi.api.profile_views")

router = APIRouter()


@router.post("/track", response_model=ProfileViewTrackResponse, summary="Record a profile view")
async def track_view(
    payload: ProfileViewTrack,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    view = await get_profile_view_service().track_view(
        current_user.id, payload.viewed_user_id, db
    )
    return {"tracked": view is not None, "view": view}


@router.get("/my-views", response_model=ProfileViewListResponse, summary="Who viewed my profile")
async def my_views(
    limit: int = Query(20, ge=1, le=100),
    skip: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    service = get_profile_view_service()
    return {
        "views": await service.list_views(current_user.id, db, limit=limit, skip=skip),
        "total": await service.view_count(current_user.id, db),
    }
