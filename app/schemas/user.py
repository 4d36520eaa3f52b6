from pydantic import BaseModel, Field, field_validator, model_validator
from uuid import UUID
from datetime import date, datetime
from typing import Optional, Literal

from app.utils.photos import sort_photos

Gender = Literal["male", "female", "other"]
MaritalStatus = Literal["unmarried", "divorced", "widowed", "separated"]

class Photo(BaseModel):
    url: str
    is_primary: bool = False
    order: int = 0

class Preferences(BaseModel):
    min_age: Optional[int] = Field(None, ge=18, le=100)
    max_age: Optional[int] = Field(None, ge=18, le=100)
    gender: Optional[Gender] = None
    min_height: Optional[int] = None
    max_height: Optional[int] = None
    religion: Optional[str] = None
    caste: Optional[str] = None
    location: Optional[str] = None
    education: Optional[str] = None
    occupation: Optional[str] = None
    marital_status: Optional[MaritalStatus] = None

    @model_validator(mode="after")
    def check_ranges(self) -> "Preferences":
        if self.min_age is not None and self.max_age is not None and self.min_age > self.max_age:
            raise ValueError("min_age must not exceed max_age")
        if (
            self.min_height is not None
            and self.max_height is not None
            and self.min_height > self.max_height
        ):
            raise ValueError("min_height must not exceed max_height")
        return self

class HoroscopeDetails(BaseModel):
    star_sign: Optional[str] = None
    rashi: Optional[str] = None
    nakshatra: Optional[str] = None

class UserCreate(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    password: str = Field(min_length=6, max_length=72)
    name: str = Field(min_length=1, max_length=100)
    gender: Gender
    date_of_birth: Optional[date] = None
    age: Optional[int] = Field(None, ge=18, le=100)
    marital_status: MaritalStatus = "unmarried"
    city: Optional[str] = None
    state: Optional[str] = None
    religion: Optional[str] = None
    caste: Optional[str] = None

    @model_validator(mode="after")
    def require_contact(self) -> "UserCreate":
        if not self.email and not self.phone:
            raise ValueError("Either email or phone is required")
        return self

class UserUpdate(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    gender: Optional[Gender] = None
    date_of_birth: Optional[date] = None
    age: Optional[int] = Field(None, ge=18, le=100)
    marital_status: Optional[MaritalStatus] = None
    height_cm: Optional[int] = Field(None, ge=100, le=250)
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    religion: Optional[str] = None
    caste: Optional[str] = None
    mother_tongue: Optional[str] = None
    education: Optional[str] = None
    occupation: Optional[str] = None
    annual_income: Optional[int] = Field(None, ge=0)
    bio: Optional[str] = Field(None, max_length=2000)
    preferences: Optional[Preferences] = None
    horoscope_details: Optional[HoroscopeDetails] = None
    accepts_interests: Optional[bool] = None
    accepts_messages: Optional[bool] = None

class UserSummary(BaseModel):
    id: UUID
    name: str
    gender: str
    age: Optional[int] = None
    city: Optional[str] = None
    photos: list[Photo] = []

    model_config = {"from_attributes": True}

    @field_validator("photos", mode="before")
    @classmethod
    def display_order(cls, v):
        return sort_photos(v or [])

class UserResponse(UserSummary):
    date_of_birth: Optional[date] = None
    marital_status: str
    height_cm: Optional[int] = None
    state: Optional[str] = None
    country: str
    religion: Optional[str] = None
    caste: Optional[str] = None
    mother_tongue: Optional[str] = None
    education: Optional[str] = None
    occupation: Optional[str] = None
    annual_income: Optional[int] = None
    bio: Optional[str] = None
    preferences: Optional[Preferences] = None
    horoscope_details: Optional[HoroscopeDetails] = None
    accepts_interests: bool
    accepts_messages: bool
    is_profile_complete: bool
    created_at: datetime

class MeResponse(UserResponse):
    email: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool
    is_admin: bool

class UserListResponse(BaseModel):
    users: list[UserResponse]
    total: int
    limit: int
    skip: int

class CompletenessResponse(BaseModel):
    percentage: int
    missing_fields: list[str]
    is_profile_complete: bool

class PhotosResponse(BaseModel):
    photos: list[Photo]
