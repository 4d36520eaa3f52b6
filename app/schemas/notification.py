from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import Optional, Any

from app.schemas.user import UserSummary

class NotificationResponse(BaseModel):
    id: UUID
    type: str
    title: str
    message: str
    related_user_id: Optional[UUID] = None
    related_id: Optional[UUID] = None
    is_read: bool
    read_at: Optional[datetime] = None
    is_admin_notification: bool
    metadata: Optional[dict[str, Any]] = Field(None, validation_alias="metadata_")
    created_at: datetime
    related_user: Optional[UserSummary] = None

    model_config = {"from_attributes": True}

class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int

class BroadcastRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1, max_length=2000)
    metadata: Optional[dict[str, Any]] = None

class BroadcastResponse(BaseModel):
    recipients: int
