"""Authentication business logic: sign-up, sign-in, token issue."""
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AuthenticationError, ConflictError
from app.core.security import verify_password, get_password_hash, create_access_token, create_refresh_token
from app.models.profile import Profile
from app.schemas.user import RegisterRequest, Token
from app.services.profile_service import profile_to_response


async def get_profile_by_email(db: AsyncSession, email: str) -> Profile | None:
    result = await db.execute(select(Profile).where(Profile.email == email.lower()))
    return result.scalar_one_or_none()


async def register_profile(db: AsyncSession, data: RegisterRequest) -> Profile:
    """Create the account's profile row. Display name defaults to the email's local part."""
    email = data.email.lower()
    if await get_profile_by_email(db, email):
        raise ConflictError("Email already registered")
    profile = Profile(
        email=email,
        password_hash=get_password_hash(data.password),
        display_name=data.display_name or email.split("@")[0],
    )
    db.add(profile)
    await db.flush()
    await db.refresh(profile)
    return profile


async def authenticate(db: AsyncSession, email: str, password: str) -> Profile:
    profile = await get_profile_by_email(db, email)
    if not profile or not verify_password(password, profile.password_hash):
        raise AuthenticationError("Invalid email or password")
    return profile


async def get_profile_for_refresh(db: AsyncSession, user_id: UUID) -> Profile | None:
    result = await db.execute(select(Profile).where(Profile.id == user_id))
    return result.scalar_one_or_none()


def issue_tokens(profile: Profile) -> Token:
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return Token(
        access_token=create_access_token(profile.id),
        refresh_token=create_refresh_token(profile.id),
        expires_at=expires_at,
        user=profile_to_response(profile, include_email=True),
    )
