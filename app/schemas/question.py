from pydantic import BaseModel, Field, field_validator
from uuid import UUID
from datetime import datetime
from typing import Optional, Literal

from app.schemas.user import UserSummary

Category = Literal[
    "relationship", "wedding", "family", "dowry",
    "traditions", "lifestyle", "career", "general",
]
VoteType = Literal["upvote", "downvote"]

class QuestionCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1, max_length=5000)
    category: Category = "general"
    tags: list[str] = []

    @field_validator("tags")
    @classmethod
    def normalise_tags(cls, v: list[str]) -> list[str]:
        return [t.strip().lower() for t in v if t.strip()]

class QuestionUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1, max_length=5000)
    category: Optional[Category] = None
    tags: Optional[list[str]] = None

class QuestionResponse(BaseModel):
    id: UUID
    title: str
    content: str
    category: str
    tags: Optional[list[str]] = None
    author_id: UUID
    author: Optional[UserSummary] = None
    upvotes: int
    downvotes: int
    views: int
    answers_count: int
    is_solved: bool
    solved_answer_id: Optional[UUID] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class QuestionDetailResponse(BaseModel):
    question: QuestionResponse
    user_vote: Optional[str] = None

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

class QuestionListResponse(BaseModel):
    questions: list[QuestionResponse]
    pagination: Pagination

class AnswerCreate(BaseModel):
    content: str = Field(min_length=1, max_length=5000)

class AnswerResponse(BaseModel):
    id: UUID
    question_id: UUID
    author_id: UUID
    author: Optional[UserSummary] = None
    content: str
    upvotes: int
    downvotes: int
    is_accepted: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class VoteRequest(BaseModel):
    vote_type: VoteType

class VoteResponse(BaseModel):
    upvotes: int
    downvotes: int
    user_vote: Optional[str] = None
