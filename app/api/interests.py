"""
Gahoi Sathi - Interests API

Send an interest, accept or reject one you received, and list interests
by direction.
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_interest_service
from app.database import get_db
from app.models.interest import Interest
from app.models.user import User
from app.schemas.interest import (
    InterestDecision,
    InterestRespond,
    InterestResponse,
    InterestSend,
    InterestStatusResponse,
)

logger = structlog.get_logger("sathi.api.interests")

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# POST /send - Send an interest
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/send",
    response_model=InterestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send an interest",
)
async def send_interest(
    payload: InterestSend,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Interest:
    return await get_interest_service().send_interest(current_user.id, payload.to_user_id, db)


# ──────────────────────────────────────────────────────────────────────────────
# POST /respond, /{id}/respond - Accept or reject
# ──────────────────────────────────────────────────────────────────────────────

@router.post("/respond", response_model=InterestResponse, summary="Respond to an interest by sender")
async def respond_to_interest(
    payload: InterestRespond,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Interest:
    return await get_interest_service().respond_to_interest(
        current_user.id, payload.from_user_id, payload.decision, db
    )


@router.post("/{interest_id}/respond", response_model=InterestResponse, summary="Respond to an interest by id")
async def respond_by_id(
    interest_id: uuid.UUID,
    payload: InterestDecision,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Interest:
    return await get_interest_service().respond_by_id(
        interest_id, current_user.id, payload.decision, db
    )


# ──────────────────────────────────────────────────────────────────────────────
# Listings
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/incoming", response_model=list[InterestResponse], summary="Pending interests received")
async def list_incoming(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[Interest]:
    return await get_interest_service().list_incoming(current_user.id, db)


@router.get("/outgoing", response_model=list[InterestResponse], summary="Interests sent")
async def list_outgoing(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[Interest]:
    return await get_interest_service().list_outgoing(current_user.id, db)


@router.get("/accepted", response_model=list[InterestResponse], summary="Accepted interests, both directions")
async def list_accepted(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[Interest]:
    return await get_interest_service().list_accepted(current_user.id, db)


@router.get("/status/{user_id}", response_model=InterestStatusResponse, summary="Interest status with a member")
async def get_status(
    user_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await get_interest_service().get_status(current_user.id, user_id, db)
