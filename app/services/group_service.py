"""Group and membership lifecycle.

Invariant: while a group has members, at least one of them is an admin or owner.
Every mutation below checks it before touching the membership table.
"""
import logging
from uuid import UUID

from sqlalchemy import case, desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.models.group import (
    MANAGING_ROLES,
    ROLE_ADMIN,
    ROLE_MEMBER,
    ROLE_OWNER,
    Group,
    GroupMembership,
)
from app.models.profile import Profile
from app.models.topic import ALL_CATEGORIES, TOPIC_CATEGORIES
from app.schemas.group import GroupCreate, GroupResponse, MemberResponse
from app.services.profile_service import author_summary, get_profiles_by_ids

logger = logging.getLogger(__name__)

ALREADY_MEMBER = "You are already a member of this group"
NOT_MEMBER = "You are not a member of this group"
ONLY_ADMIN = "You cannot leave the group as you are the only admin. Promote another member to admin first."
LAST_OWNER = "Cannot leave group as the last owner. Transfer ownership first or delete the group."


def group_to_response(group: Group, creator: Profile | None, members_count: int, is_joined: bool) -> GroupResponse:
    return GroupResponse(
        id=group.id,
        name=group.name,
        description=group.description,
        category=group.category,
        schedule=group.schedule,
        created_at=group.created_at,
        members_count=members_count,
        is_joined=is_joined,
        creator=author_summary(group.created_by, creator),
    )


async def count_members(db: AsyncSession, group_ids: list[UUID]) -> dict[UUID, int]:
    if not group_ids:
        return {}
    result = await db.execute(
        select(GroupMembership.group_id, func.count(GroupMembership.id))
        .where(GroupMembership.group_id.in_(group_ids))
        .group_by(GroupMembership.group_id)
    )
    return {group_id: count for group_id, count in result.all()}


async def get_joined_group_ids(db: AsyncSession, user_id: UUID | None, group_ids: list[UUID]) -> set[UUID]:
    if user_id is None or not group_ids:
        return set()
    result = await db.execute(
        select(GroupMembership.group_id).where(
            GroupMembership.user_id == user_id,
            GroupMembership.group_id.in_(group_ids),
        )
    )
    return {row[0] for row in result.all()}


async def _annotate(db: AsyncSession, groups: list[Group], viewer_id: UUID | None) -> list[GroupResponse]:
    group_ids = [g.id for g in groups]
    profiles = await get_profiles_by_ids(db, [g.created_by for g in groups])
    counts = await count_members(db, group_ids)
    joined = await get_joined_group_ids(db, viewer_id, group_ids)
    return [
        group_to_response(g, profiles.get(g.created_by), counts.get(g.id, 0), g.id in joined)
        for g in groups
    ]


async def list_groups(
    db: AsyncSession,
    *,
    viewer_id: UUID | None = None,
    category: str | None = None,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[GroupResponse], int]:
    filters = [Group.is_active.is_(True)]
    if category and category != ALL_CATEGORIES:
        filters.append(Group.category == category)
    total = (await db.execute(select(func.count(Group.id)).where(*filters))).scalar() or 0
    result = await db.execute(
        select(Group).where(*filters).order_by(desc(Group.created_at)).offset(offset).limit(limit)
    )
    return await _annotate(db, list(result.scalars().all()), viewer_id), total


async def get_active_group_or_404(db: AsyncSession, group_id: UUID) -> Group:
    result = await db.execute(select(Group).where(Group.id == group_id, Group.is_active.is_(True)))
    group = result.scalar_one_or_none()
    if not group:
        raise NotFoundError("Group not found")
    return group


async def get_group(db: AsyncSession, group_id: UUID, viewer_id: UUID | None) -> GroupResponse:
    group = await get_active_group_or_404(db, group_id)
    return (await _annotate(db, [group], viewer_id))[0]


async def create_group(db: AsyncSession, creator: Profile, data: GroupCreate) -> GroupResponse:
    if data.category not in TOPIC_CATEGORIES:
        raise ValidationError("Invalid category", details=f"Expected one of: {', '.join(TOPIC_CATEGORIES)}")
    group = Group(
        name=data.name,
        description=data.description,
        category=data.category,
        schedule=data.schedule or data.meeting_time or None,
        created_by=creator.id,
        is_active=True,
    )
    db.add(group)
    await db.flush()
    db.add(GroupMembership(group_id=group.id, user_id=creator.id, role=ROLE_ADMIN))
    await db.flush()
    await db.refresh(group)
    logger.info("Group %s created by %s", group.id, creator.id)
    return group_to_response(group, creator, members_count=1, is_joined=True)


async def get_membership(db: AsyncSession, group_id: UUID, user_id: UUID) -> GroupMembership | None:
    result = await db.execute(
        select(GroupMembership).where(GroupMembership.group_id == group_id, GroupMembership.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def _role_counts(db: AsyncSession, group_id: UUID) -> tuple[int, int, int]:
    """(total members, admins + owners, owners) for a group."""
    result = await db.execute(
        select(
            func.count(GroupMembership.id),
            func.coalesce(func.sum(case((GroupMembership.role.in_(MANAGING_ROLES), 1), else_=0)), 0),
            func.coalesce(func.sum(case((GroupMembership.role == ROLE_OWNER, 1), else_=0)), 0),
        ).where(GroupMembership.group_id == group_id)
    )
    total, managers, owners = result.one()
    return int(total or 0), int(managers or 0), int(owners or 0)


async def list_members(db: AsyncSession, group_id: UUID) -> list[MemberResponse]:
    await get_active_group_or_404(db, group_id)
    role_rank = case((GroupMembership.role == ROLE_OWNER, 0), (GroupMembership.role == ROLE_ADMIN, 1), else_=2)
    result = await db.execute(
        select(GroupMembership)
        .where(GroupMembership.group_id == group_id)
        .order_by(role_rank, GroupMembership.joined_at)
    )
    memberships = list(result.scalars().all())
    profiles = await get_profiles_by_ids(db, [m.user_id for m in memberships])
    return [
        MemberResponse(user=author_summary(m.user_id, profiles.get(m.user_id)), role=m.role, joined_at=m.joined_at)
        for m in memberships
    ]


async def join_group(db: AsyncSession, user_id: UUID, group_id: UUID) -> GroupMembership:
    await get_active_group_or_404(db, group_id)
    if await get_membership(db, group_id, user_id):
        raise ConflictError(ALREADY_MEMBER)
    membership = GroupMembership(group_id=group_id, user_id=user_id, role=ROLE_MEMBER)
    try:
        async with db.begin_nested():
            db.add(membership)
            await db.flush()
    except IntegrityError:
        raise ConflictError(ALREADY_MEMBER)
    await db.refresh(membership)
    return membership


async def leave_group(db: AsyncSession, user_id: UUID, group_id: UUID) -> bool:
    """Drop the caller's membership. Returns True when the group was deactivated as a result.

    The last admin/owner may not leave while other members remain. When the caller
    is the only member left, the membership goes and the group is deactivated.
    """
    membership = await get_membership(db, group_id, user_id)
    if membership is None:
        raise ConflictError(NOT_MEMBER)

    total, managers, _ = await _role_counts(db, group_id)
    if membership.role in MANAGING_ROLES and managers == 1 and total > 1:
        raise ConflictError(ONLY_ADMIN)

    await db.delete(membership)
    deactivated = False
    if total == 1:
        group = await db.get(Group, group_id)
        if group is not None and group.is_active:
            group.is_active = False
            deactivated = True
            logger.info("Group %s deactivated: last member %s left", group_id, user_id)
    await db.flush()
    return deactivated


async def remove_member(db: AsyncSession, caller_id: UUID, group_id: UUID, user_id: UUID) -> bool:
    """Remove a member. Removing yourself is a leave; removing others requires ownership."""
    if caller_id == user_id:
        membership = await get_membership(db, group_id, user_id)
        if membership is None:
            raise NotFoundError("Membership not found")
        if membership.role == ROLE_OWNER:
            _, _, owners = await _role_counts(db, group_id)
            if owners == 1:
                raise ConflictError(LAST_OWNER)
        return await leave_group(db, user_id, group_id)

    target = await get_membership(db, group_id, user_id)
    if target is None:
        raise NotFoundError("Membership not found")
    caller = await get_membership(db, group_id, caller_id)
    if caller is None or caller.role != ROLE_OWNER:
        raise AuthorizationError("You don't have permission to remove this member")
    if target.role == ROLE_OWNER:
        raise ConflictError("Cannot remove a group owner")
    await db.delete(target)
    await db.flush()
    return False


async def change_member_role(
    db: AsyncSession,
    caller_id: UUID,
    group_id: UUID,
    user_id: UUID,
    role: str,
) -> GroupMembership:
    """Promote, demote or transfer ownership, without leaving the group unmanaged."""
    await get_active_group_or_404(db, group_id)
    caller = await get_membership(db, group_id, caller_id)
    if caller is None or caller.role not in MANAGING_ROLES:
        raise AuthorizationError("Only group admins can change member roles")
    target = await get_membership(db, group_id, user_id)
    if target is None:
        raise NotFoundError("Membership not found")
    if target.role == ROLE_OWNER and caller.role != ROLE_OWNER:
        raise AuthorizationError("Only a group owner can change an owner's role")
    if target.role == role:
        return target

    _, managers, owners = await _role_counts(db, group_id)
    # an admin may name the first owner; after that only owners grant ownership
    if role == ROLE_OWNER and caller.role != ROLE_OWNER and owners > 0:
        raise AuthorizationError("Only a group owner can grant ownership")
    if target.role in MANAGING_ROLES and role not in MANAGING_ROLES and managers == 1:
        raise ConflictError("A group must keep at least one admin")
    if target.role == ROLE_OWNER and owners == 1:
        raise ConflictError(LAST_OWNER)

    target.role = role
    await db.flush()
    await db.refresh(target)
    logger.info("Member %s of group %s set to %s by %s", user_id, group_id, role, caller_id)
    return target


async def delete_group(db: AsyncSession, caller_id: UUID, group_id: UUID) -> None:
    """Soft delete; memberships stay for the record."""
    group = await get_active_group_or_404(db, group_id)
    caller = await get_membership(db, group_id, caller_id)
    if caller is None or caller.role not in MANAGING_ROLES:
        raise AuthorizationError("Only group admins can delete this group")
    group.is_active = False
    await db.flush()
    logger.info("Group %s deleted by %s", group_id, caller_id)
