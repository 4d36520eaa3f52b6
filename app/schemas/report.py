from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import Optional, Literal

from app.schemas.user import UserSummary

ReportReason = Literal[
    "inappropriate-content",
    "fake-profile",
    "misleading-information",
    "harassment",
    "spam",
    "other",
]
ReportStatus = Literal["pending", "reviewed", "resolved", "dismissed"]

class ReportCreate(BaseModel):
    reported_user_id: UUID
    reason: ReportReason
    description: Optional[str] = Field(None, max_length=500)

class ReportStatusUpdate(BaseModel):
    status: ReportStatus
    admin_notes: Optional[str] = Field(None, max_length=1000)

class ReportResponse(BaseModel):
    id: UUID
    reported_user_id: UUID
    reported_by: UUID
    reason: str
    description: Optional[str] = None
    status: str  # pending/reviewed/resolved/dismissed
    admin_notes: Optional[str] = None
    reviewed_by: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime
    reported_user: Optional[UserSummary] = None
    reporter: Optional[UserSummary] = None

    model_config = {"from_attributes": True}

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

class ReportListResponse(BaseModel):
    reports: list[ReportResponse]
    pagination: Pagination
