"""
Gahoi Sathi — Profile Reports

Any active member may report another member's profile once.  Reports
start ``pending``; admins page through them and move them to
``reviewed``, ``resolved`` or ``dismissed``, which stamps the reviewer
and review time.
"""

from __future__ import annotations

import math
import uuid

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import utcnow
from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.report import (
    ADMIN_NOTES_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    REPORT_REASONS,
    REPORT_STATUSES,
    STATUS_PENDING,
    ProfileReport,
)
from app.models.user import User

logger = structlog.get_logger("sathi.report_service")

DEFAULT_PAGE_SIZE = 20


class ReportService:
    async def create_report(
        self,
        reporter_id: uuid.UUID,
        reported_user_id: uuid.UUID,
        reason: str,
        db: AsyncSession,
        description: str | None = None,
    ) -> ProfileReport:
        """File a report against ``reported_user_id``.

        Raises
        ------
        ValidationError
            Unknown reason, an over-long description, or reporting yourself.
        NotFoundError
            The reporter or the reported user does not exist.
        ConflictError
            The reporter already reported this profile.
        """
        log = logger.bind(reporter_id=str(reporter_id), reported_user_id=str(reported_user_id))

        if reason not in REPORT_REASONS:
            raise ValidationError(f"Invalid report reason: {reason}")
        if description and len(description) > DESCRIPTION_MAX_LENGTH:
            raise ValidationError(
                f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters"
            )

        reporter = await db.get(User, reporter_id)
        if reporter is None or not reporter.is_active:
            raise NotFoundError("Reporter not found")
        reported = await db.get(User, reported_user_id)
        if reported is None:
            raise NotFoundError("Reported user not found")
        if reporter_id == reported_user_id:
            raise ValidationError("Cannot report your own profile")

        existing = await db.execute(
            select(ProfileReport.id).where(
                ProfileReport.reported_user_id == reported_user_id,
                ProfileReport.reported_by == reporter_id,
            )
        )
        if existing.first() is not None:
            raise ConflictError("You have already reported this profile")

        report = ProfileReport(
            reported_user=reported,
            reporter=reporter,
            reason=reason,
            description=description,
            status=STATUS_PENDING,
        )
        db.add(report)
        try:
            await db.flush()
        except IntegrityError as exc:
            raise ConflictError("You have already reported this profile") from exc

        log.info("profile_reported", report_id=str(report.id), reason=reason)
        return report

    async def list_reports(
        self,
        db: AsyncSession,
        status: str | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> dict:
        """Newest-first page of reports, optionally filtered by status.

        Returns
        -------
        dict
            ``{"reports": [...], "pagination": {"page", "limit", "total", "pages"}}``.
        """
        conditions = []
        if status is not None:
            if status not in REPORT_STATUSES:
                raise ValidationError(f"Invalid report status: {status}")
            conditions.append(ProfileReport.status == status)

        total = (
            await db.execute(
                select(func.count()).select_from(ProfileReport).where(*conditions)
            )
        ).scalar_one()
        result = await db.execute(
            select(ProfileReport)
            .where(*conditions)
            .order_by(ProfileReport.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return {
            "reports": list(result.scalars().all()),
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit),
            },
        }

    async def get_report(self, report_id: uuid.UUID, db: AsyncSession) -> ProfileReport:
        report = await db.get(ProfileReport, report_id)
        if report is None:
            raise NotFoundError("Report not found")
        return report

    async def update_status(
        self,
        report_id: uuid.UUID,
        status: str,
        reviewer: User,
        db: AsyncSession,
        admin_notes: str | None = None,
    ) -> ProfileReport:
        """Record an admin decision on a report."""
        if status not in REPORT_STATUSES:
            raise ValidationError(f"Invalid report status: {status}")
        if admin_notes and len(admin_notes) > ADMIN_NOTES_MAX_LENGTH:
            raise ValidationError(
                f"Admin notes must be at most {ADMIN_NOTES_MAX_LENGTH} characters"
            )

        report = await self.get_report(report_id, db)
        report.status = status
        report.reviewer = reviewer
        report.reviewed_at = utcnow()
        if admin_notes:
            report.admin_notes = admin_notes
        await db.flush()
        logger.info(
            "report_reviewed",
            report_id=str(report_id),
            status=status,
            reviewer_id=str(reviewer.id),
        )
        return report

    async def reports_for_user(
        self, user_id: uuid.UUID, db: AsyncSession
    ) -> list[ProfileReport]:
        result = await db.execute(
            select(ProfileReport)
            .where(ProfileReport.reported_user_id == user_id)
            .order_by(ProfileReport.created_at.desc())
        )
        return list(result.scalars().all())
