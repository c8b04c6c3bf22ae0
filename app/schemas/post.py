"""Pydantic schemas for forum posts and likes."""
from datetime import datetime
from uuid import UUID

from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.user import AuthorSummary


class PostCreate(CamelModel):
    topic_id: UUID
    content: str = Field(..., min_length=1)
    parent_id: UUID | None = None


class PostUpdate(CamelModel):
    content: str = Field(..., min_length=1)


class PostResponse(CamelModel):
    id: UUID
    topic_id: UUID
    parent_id: UUID | None = None
    content: str
    created_at: datetime
    likes: int = 0
    is_liked: bool = False
    author: AuthorSummary
    replies: list["PostResponse"] = []


class PostListResponse(CamelModel):
    posts: list[PostResponse]


class PostMutationResponse(CamelModel):
    success: bool = True
    post: PostResponse


class LikeCreate(CamelModel):
    post_id: UUID


class LikeResponse(CamelModel):
    id: UUID
    user_id: UUID
    post_id: UUID
    created_at: datetime


class LikeCreateResponse(CamelModel):
    success: bool = True
    like: LikeResponse
