from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from typing import Optional, Literal

from app.schemas.user import UserSummary

Decision = Literal["accept", "reject"]

class InterestSend(BaseModel):
    to_user_id: UUID

class InterestRespond(BaseModel):
    from_user_id: UUID
    decision: Decision

class InterestDecision(BaseModel):
    decision: Decision

class InterestResponse(BaseModel):
    id: UUID
    from_user_id: UUID
    to_user_id: UUID
    status: str  # pending/accepted/rejected
    created_at: datetime
    responded_at: Optional[datetime] = None
    from_user: Optional[UserSummary] = None
    to_user: Optional[UserSummary] = None

    model_config = {"from_attributes": True}

class InterestStatusResponse(BaseModel):
    sent: Optional[InterestResponse] = None
    received: Optional[InterestResponse] = None
