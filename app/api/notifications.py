"""
Gahoi Sathi — Notifications API
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_notification_service, require_admin
from app.database import get_db
from app.models.notification import Notification
from app.models.user import User
from app.schemas.message import MarkReadResponse, UnreadCountResponse
from app.schemas.notification import (
    BroadcastRequest,
    BroadcastResponse,
    NotificationListResponse,
    NotificationResponse,
)

logger = structlog.get_logger("sathi.api.notifications")

router = APIRouter()


@router.get("/", response_model=NotificationListResponse, summary="List notifications")
async def list_notifications(
    unread_only: bool = Query(False),
    type: Optional[str] = Query(None, description="Filter by notification type"),
    limit: int = Query(20, ge=1, le=100),
    skip: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    service = get_notification_service()
    notifications = await service.list_for_user(
        current_user.id,
        db,
        only_unread=unread_only,
        notification_type=type,
        limit=limit,
        skip=skip,
    )
    return {
        "notifications": notifications,
        "unread_count": await service.unread_count(current_user.id, db),
    }


@router.get("/unread-count", response_model=UnreadCountResponse, summary="Unread notification count")
async def unread_count(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return {"count": await get_notification_service().unread_count(current_user.id, db)}


@router.put("/read-all", response_model=MarkReadResponse, summary="Mark all notifications read")
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return {"updated": await get_notification_service().mark_all_read(current_user.id, db)}


@router.put("/{notification_id}/read", response_model=NotificationResponse, summary="Mark one notification read")
async def mark_read(
    notification_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Notification:
    return await get_notification_service().mark_read(notification_id, current_user.id, db)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a notification")
async def delete_notification(
    notification_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    await get_notification_service().delete(notification_id, current_user.id, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/admin/broadcast",
    response_model=BroadcastResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Broadcast an admin notification to every active member",
)
async def broadcast(
    payload: BroadcastRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    logger.info("admin_broadcast_requested", admin_id=str(admin.id))
    recipients = await get_notification_service().broadcast_admin(
        payload.title, payload.message, db, metadata=payload.metadata
    )
    return {"recipients": recipients}
