"""
Gahoi Sathi — Browser Push API

VAPID key discovery and subscription management for Web Push.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_push_service
from app.database import get_db
from app.models.push_subscription import PushSubscription
from app.models.user import User
from app.schemas.push import (
    PushSubscriptionResponse,
    SubscribeRequest,
    UnsubscribeRequest,
    UnsubscribeResponse,
    VapidKeyResponse,
)

logger = structlog.get_logger("sathi.api.push")

router = APIRouter()


@router.get("/vapid-key", response_model=VapidKeyResponse, summary="Public VAPID key")
async def vapid_key() -> dict:
    key = get_push_service().get_vapid_public_key()
    if not key:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Push notifications are not configured",
        )
    return {"public_key": key}


@router.post(
    "/subscribe",
    response_model=PushSubscriptionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a push subscription",
)
async def subscribe(
    payload: SubscribeRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PushSubscription:
    sub = payload.subscription
    return await get_push_service().subscribe(
        current_user.id,
        sub.endpoint,
        sub.keys.p256dh,
        sub.keys.auth,
        db,
        user_agent=payload.user_agent,
        device=payload.device,
    )


@router.post("/unsubscribe", response_model=UnsubscribeResponse, summary="Remove a push subscription")
async def unsubscribe(
    payload: UnsubscribeRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    removed = await get_push_service().unsubscribe(current_user.id, payload.endpoint, db)
    return {"removed": removed}


@router.get("/subscriptions", response_model=list[PushSubscriptionResponse], summary="My push subscriptions")
async def list_subscriptions(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[PushSubscription]:
    return await get_push_service().list_subscriptions(current_user.id, db)
