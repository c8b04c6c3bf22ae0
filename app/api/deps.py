"""API dependencies: auth, db session, Bible client."""
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AuthenticationError
from app.core.security import ACCESS, decode_token
from app.db.session import get_db
from app.models.profile import Profile
from app.services.bible_client import BibleClient

security = HTTPBearer(auto_error=False)


def get_session_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    """Access token from the Bearer header, else from the session cookie."""
    if credentials:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_token_payload(token: str | None = Depends(get_session_token)) -> dict | None:
    if not token:
        return None
    return decode_token(token, ACCESS)


async def get_current_user_optional(
    payload: dict | None = Depends(get_token_payload),
    db: AsyncSession = Depends(get_db),
) -> Profile | None:
    if payload is None:
        return None
    try:
        user_id = UUID(payload["sub"])
    except ValueError:
        return None
    result = await db.execute(select(Profile).where(Profile.id == user_id))
    return result.scalar_one_or_none()


async def get_current_user(
    user: Profile | None = Depends(get_current_user_optional),
) -> Profile:
    if user is None:
        raise AuthenticationError()
    return user


def get_bible_client(request: Request) -> BibleClient:
    """One client per app; created on first use and closed at shutdown."""
    client = getattr(request.app.state, "bible_client", None)
    if client is None:
        client = BibleClient()
        request.app.state.bible_client = client
    return client
