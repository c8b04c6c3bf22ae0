"""Pydantic schemas for groups and memberships."""
from datetime import datetime
from uuid import UUID

from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.user import AuthorSummary


class GroupCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    schedule: str | None = None
    meeting_time: str | None = None  # older clients send this instead of schedule


class GroupResponse(CamelModel):
    id: UUID
    name: str
    description: str
    category: str
    schedule: str | None = None
    created_at: datetime
    members_count: int = 0
    is_joined: bool = False
    creator: AuthorSummary


class GroupListResponse(CamelModel):
    groups: list[GroupResponse]
    total_count: int = 0


class GroupCreateResponse(CamelModel):
    success: bool = True
    group: GroupResponse


class MembershipResponse(CamelModel):
    id: UUID
    group_id: UUID
    user_id: UUID
    role: str
    joined_at: datetime


class JoinGroupResponse(CamelModel):
    success: bool = True
    membership: MembershipResponse


class LeaveGroupResponse(CamelModel):
    success: bool = True
    group_deactivated: bool = False


class MemberResponse(CamelModel):
    user: AuthorSummary
    role: str
    joined_at: datetime


class MemberListResponse(CamelModel):
    members: list[MemberResponse]


class RoleUpdate(CamelModel):
    role: str = Field(..., pattern="^(member|admin|owner)$")


class RoleUpdateResponse(CamelModel):
    success: bool = True
    membership: MembershipResponse
