from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import Optional

from app.schemas.user import UserSummary

class MessageSend(BaseModel):
    receiver_id: UUID
    # Length is enforced by the service so the limit stays configurable
    content: str = Field(min_length=1)

class MessageResponse(BaseModel):
    id: UUID
    sender_id: UUID
    receiver_id: UUID
    conversation_id: str
    content: str
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}

class ConversationPage(BaseModel):
    messages: list[MessageResponse]
    has_more: bool
    next_cursor: Optional[datetime] = None
    next_cursor_id: Optional[UUID] = None

class ConversationSummary(BaseModel):
    conversation_id: str
    other_user: UserSummary
    last_message: MessageResponse
    unread_count: int

class ConversationListResponse(BaseModel):
    conversations: list[ConversationSummary]

class MarkReadResponse(BaseModel):
    updated: int

class UnreadCountResponse(BaseModel):
    count: int
