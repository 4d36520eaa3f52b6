"""
Gahoi Sathi - Users API

Member search, own-profile management and public profile lookup.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_user_service
from app.database import get_db
from app.models.user import User
from app.schemas.user import (
    CompletenessResponse,
    MeResponse,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from app.services.user_service import completeness

logger = structlog.get_logger("sathi.api.users")

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# GET / - Search members
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/", response_model=UserListResponse, summary="Search members")
async def search_users(
    gender: Optional[str] = Query(None),
    min_age: Optional[int] = Query(None, ge=18, le=100),
    max_age: Optional[int] = Query(None, ge=18, le=100),
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    religion: Optional[str] = Query(None),
    caste: Optional[str] = Query(None),
    marital_status: Optional[str] = Query(None),
    education: Optional[str] = Query(None),
    occupation: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100, description="Max users to return"),
    skip: int = Query(0, ge=0, description="Number of users to skip"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Return active members other than the caller matching every filter."""
    filters = {
        "gender": gender,
        "min_age": min_age,
        "max_age": max_age,
        "city": city,
        "state": state,
        "religion": religion,
        "caste": caste,
        "marital_status": marital_status,
        "education": education,
        "occupation": occupation,
    }
    logger.info("search_users", user_id=str(current_user.id), limit=limit, skip=skip)
    return await get_user_service().search_users(current_user.id, filters, db, limit, skip)


# ──────────────────────────────────────────────────────────────────────────────
# /me - Own profile
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/me", response_model=MeResponse, summary="Get own profile")
async def get_me(current_user: User = Depends(get_current_user)) -> User:
    return current_user


@router.put("/me", response_model=MeResponse, summary="Update own profile")
async def update_me(
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    return await get_user_service().update_profile(
        current_user.id, current_user, payload.model_dump(exclude_unset=True), db
    )


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT, summary="Delete own profile")
async def delete_me(
    hard: bool = Query(False, description="Remove the account permanently"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    await get_user_service().delete_profile(current_user.id, db, hard=hard)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/me/completeness",
    response_model=CompletenessResponse,
    summary="Profile completeness score",
)
async def get_completeness(current_user: User = Depends(get_current_user)) -> dict:
    return completeness(current_user)


# ──────────────────────────────────────────────────────────────────────────────
# /{user_id} - Other profiles
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/{user_id}", response_model=UserResponse, summary="Get a member profile")
async def get_user(
    user_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    return await get_user_service().get_profile(user_id, db, requester_id=current_user.id)


@router.put("/{user_id}", response_model=MeResponse, summary="Update a profile (owner or admin)")
async def update_user(
    user_id: uuid.UUID,
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    return await get_user_service().update_profile(
        user_id, current_user, payload.model_dump(exclude_unset=True), db
    )
