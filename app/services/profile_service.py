"""Profile lookups and the author/creator summary attached to community rows."""
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.models.profile import Profile
from app.schemas.user import AuthorSummary, ProfileResponse, ProfileUpdate

UNKNOWN_AUTHOR = "Unknown"


def placeholder_avatar(name: str | None) -> str:
    initials = name[:2] if name else "UK"
    return settings.PLACEHOLDER_AVATAR_URL.format(initials=initials)


def author_summary(user_id: UUID | None, profile: Profile | None) -> AuthorSummary:
    """Name and avatar for display, falling back when the profile row or its fields are missing."""
    name = profile.display_name if profile and profile.display_name else None
    avatar = profile.avatar_url if profile and profile.avatar_url else None
    return AuthorSummary(
        id=str(user_id) if user_id else "",
        name=name or UNKNOWN_AUTHOR,
        avatar=avatar or placeholder_avatar(name),
    )


async def get_profiles_by_ids(db: AsyncSession, user_ids: Iterable[UUID | None]) -> dict[UUID, Profile]:
    ids = {uid for uid in user_ids if uid}
    if not ids:
        return {}
    result = await db.execute(select(Profile).where(Profile.id.in_(ids)))
    return {p.id: p for p in result.scalars().all()}


async def get_profile(db: AsyncSession, user_id: UUID) -> Profile:
    result = await db.execute(select(Profile).where(Profile.id == user_id))
    profile = result.scalar_one_or_none()
    if not profile:
        raise NotFoundError("Profile not found")
    return profile


async def update_profile(db: AsyncSession, profile: Profile, data: ProfileUpdate) -> Profile:
    if data.display_name is not None:
        profile.display_name = data.display_name
    if data.avatar_url is not None:
        profile.avatar_url = data.avatar_url or None
    await db.flush()
    await db.refresh(profile)
    return profile


def profile_to_response(profile: Profile, include_email: bool = False) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        email=profile.email if include_email else None,
        display_name=profile.display_name,
        avatar_url=profile.avatar_url,
        created_at=profile.created_at,
    )
