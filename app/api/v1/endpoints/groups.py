"""Small-group endpoints: listing, lifecycle and membership."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_current_user_optional, get_db
from app.models.profile import Profile
from app.schemas.base import SuccessResponse
from app.schemas.group import (
    GroupCreate,
    GroupCreateResponse,
    GroupListResponse,
    GroupResponse,
    JoinGroupResponse,
    LeaveGroupResponse,
    MemberListResponse,
    MembershipResponse,
    RoleUpdate,
    RoleUpdateResponse,
)
from app.services.group_service import (
    change_member_role,
    create_group,
    delete_group,
    get_group,
    join_group,
    leave_group,
    list_groups,
    list_members,
    remove_member,
)

router = APIRouter(prefix="/groups", tags=["groups"])


@router.get("", response_model=GroupListResponse)
async def list_groups_endpoint(
    category: str | None = None,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: Profile | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    groups, total = await list_groups(
        db,
        viewer_id=current_user.id if current_user else None,
        category=category,
        limit=limit,
        offset=offset,
    )
    return GroupListResponse(groups=groups, total_count=total)


@router.post("", response_model=GroupCreateResponse)
async def create_group_endpoint(
    data: GroupCreate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    group = await create_group(db, current_user, data)
    await db.commit()
    return GroupCreateResponse(group=group)


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group_endpoint(
    group_id: UUID,
    current_user: Profile | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    return await get_group(db, group_id, current_user.id if current_user else None)


@router.delete("/{group_id}", response_model=SuccessResponse)
async def delete_group_endpoint(
    group_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_group(db, current_user.id, group_id)
    await db.commit()
    return SuccessResponse()


@router.get("/{group_id}/members", response_model=MemberListResponse)
async def list_members_endpoint(group_id: UUID, db: AsyncSession = Depends(get_db)):
    return MemberListResponse(members=await list_members(db, group_id))


@router.post("/{group_id}/members", response_model=JoinGroupResponse)
async def join_group_endpoint(
    group_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    membership = await join_group(db, current_user.id, group_id)
    await db.commit()
    return JoinGroupResponse(membership=MembershipResponse.model_validate(membership))


@router.delete("/{group_id}/members", response_model=LeaveGroupResponse)
async def leave_group_endpoint(
    group_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    deactivated = await leave_group(db, current_user.id, group_id)
    await db.commit()
    return LeaveGroupResponse(group_deactivated=deactivated)


@router.delete("/{group_id}/members/{user_id}", response_model=LeaveGroupResponse)
async def remove_member_endpoint(
    group_id: UUID,
    user_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    deactivated = await remove_member(db, current_user.id, group_id, user_id)
    await db.commit()
    return LeaveGroupResponse(group_deactivated=deactivated)


@router.put("/{group_id}/members/{user_id}", response_model=RoleUpdateResponse)
async def change_role_endpoint(
    group_id: UUID,
    user_id: UUID,
    data: RoleUpdate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    membership = await change_member_role(db, current_user.id, group_id, user_id, data.role)
    await db.commit()
    return RoleUpdateResponse(membership=MembershipResponse.model_validate(membership))
