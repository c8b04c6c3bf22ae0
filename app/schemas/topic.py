"""Pydantic schemas for forum topics."""
from datetime import datetime
from uuid import UUID

from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.post import PostResponse
from app.schemas.user import AuthorSummary


class TopicCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    tags: str | list[str] | None = None  # "a, b" or ["a", "b"]


class TopicUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1)
    category: str | None = Field(None, min_length=1)
    tags: str | list[str] | None = None


class TopicResponse(CamelModel):
    id: UUID
    title: str
    description: str
    category: str
    tags: list[str] = []
    created_at: datetime
    replies: int = 0
    views: int = 0
    author: AuthorSummary


class TopicListResponse(CamelModel):
    topics: list[TopicResponse]
    total_count: int = 0


class TopicDetailResponse(CamelModel):
    topic: TopicResponse
    posts: list[PostResponse]


class TopicMutationResponse(CamelModel):
    success: bool = True
    topic: TopicResponse
