from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from typing import Optional

from app.schemas.user import UserSummary

class ShortlistAdd(BaseModel):
    shortlisted_user_id: UUID

class ShortlistResponse(BaseModel):
    id: UUID
    user_id: UUID
    shortlisted_user_id: UUID
    created_at: datetime
    shortlisted_user: Optional[UserSummary] = None

    model_config = {"from_attributes": True}

class ShortlistListResponse(BaseModel):
    shortlist: list[ShortlistResponse]
    total: int

class ShortlistCheckResponse(BaseModel):
    is_shortlisted: bool
