"""
Gahoi Sathi — Profile Reports API

Members file reports; listing and reviewing them is admin-only.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_report_service, require_admin
from app.database import get_db
from app.models.report import ProfileReport
from app.models.user import User
from app.schemas.report import (
    ReportCreate,
    ReportListResponse,
    ReportResponse,
    ReportStatus,
    ReportStatusUpdate,
)

logger = structlog.get_logger("sathi.api.reports")

router = APIRouter()


@router.post(
    "/",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report a profile",
)
async def report_profile(
    payload: ReportCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProfileReport:
    return await get_report_service().create_report(
        current_user.id,
        payload.reported_user_id,
        payload.reason,
        db,
        description=payload.description,
    )


@router.get("/", response_model=ReportListResponse, summary="List reports (admin)")
async def list_reports(
    status_filter: Optional[ReportStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> dict:
    return await get_report_service().list_reports(db, status=status_filter, page=page, limit=limit)


@router.get(
    "/user/{user_id}",
    response_model=list[ReportResponse],
    summary="Reports filed against a member (admin)",
)
async def reports_for_user(
    user_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[ProfileReport]:
    return await get_report_service().reports_for_user(user_id, db)


@router.get("/{report_id}", response_model=ReportResponse, summary="Get a report (admin)")
async def get_report(
    report_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ProfileReport:
    return await get_report_service().get_report(report_id, db)


@router.patch("/{report_id}", response_model=ReportResponse, summary="Review a report (admin)")
async def update_report_status(
    report_id: uuid.UUID,
    payload: ReportStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ProfileReport:
    return await get_report_service().update_status(
        report_id, payload.status, admin, db, admin_notes=payload.admin_notes
    )
