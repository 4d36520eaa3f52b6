from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from typing import Optional

from app.schemas.user import UserSummary

class ProfileViewTrack(BaseModel):
    viewed_user_id: UUID

class ProfileViewResponse(BaseModel):
    id: UUID
    viewer_id: UUID
    viewed_user_id: UUID
    viewed_at: datetime
    has_messaged: bool
    viewer: Optional[UserSummary] = None

    model_config = {"from_attributes": True}

class ProfileViewTrackResponse(BaseModel):
    tracked: bool
    view: Optional[ProfileViewResponse] = None

class ProfileViewListResponse(BaseModel):
    views: list[ProfileViewResponse]
    total: int
