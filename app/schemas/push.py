from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from typing import Optional

class SubscriptionKeys(BaseModel):
    p256dh: str
    auth: str

class SubscriptionInfo(BaseModel):
    endpoint: str
    keys: SubscriptionKeys

class SubscribeRequest(BaseModel):
    subscription: SubscriptionInfo
    user_agent: Optional[str] = None
    device: Optional[str] = None

class UnsubscribeRequest(BaseModel):
    endpoint: str

class UnsubscribeResponse(BaseModel):
    removed: bool

class VapidKeyResponse(BaseModel):
    public_key: str

class PushSubscriptionResponse(BaseModel):
    id: UUID
    endpoint: str
    user_agent: Optional[str] = None
    device: Optional[str] = None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
