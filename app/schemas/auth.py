from pydantic import BaseModel, Field
from datetime import datetime

from app.schemas.user import MeResponse

class LoginRequest(BaseModel):
    identifier: str = Field(min_length=1, description="Email or phone number")
    password: str = Field(min_length=1)

class AuthResponse(BaseModel):
    token: str
    expires_at: datetime
    user: MeResponse

class LogoutResponse(BaseModel):
    status: str
