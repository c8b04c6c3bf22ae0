"""Pydantic schemas for profiles and auth."""
from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field

from app.schemas.base import CamelModel


class AuthorSummary(CamelModel):
    """Denormalized author/creator shape attached to topics, posts and groups."""
    id: str
    name: str
    avatar: str


class ProfileResponse(CamelModel):
    id: UUID
    email: str | None = None  # Only in own profile
    display_name: str | None = None
    avatar_url: str | None = None
    created_at: datetime


class ProfileUpdate(CamelModel):
    display_name: str | None = Field(None, min_length=1, max_length=100)
    avatar_url: str | None = None


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    display_name: str | None = Field(None, max_length=100)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class TokenRefresh(CamelModel):
    refresh_token: str


class Token(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: ProfileResponse


class SessionResponse(CamelModel):
    user: ProfileResponse
    expires_at: datetime | None = None
