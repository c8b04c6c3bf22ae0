"""Auth endpoints: register, login, refresh, logout, session."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db, get_token_payload
from app.core.config import settings
from app.core.exceptions import AuthenticationError
from app.core.security import REFRESH, decode_token, token_expires_at
from app.models.profile import Profile
from app.schemas.base import SuccessResponse
from app.schemas.user import LoginRequest, RegisterRequest, SessionResponse, Token, TokenRefresh
from app.services.auth_service import authenticate, get_profile_for_refresh, issue_tokens, register_profile
from app.services.profile_service import profile_to_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(response: Response, token: Token) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token.access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


@router.post("/register", response_model=Token)
async def register(
    data: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    profile = await register_profile(db, data)
    await db.commit()
    logger.info("Registered profile %s", profile.id)
    token = issue_tokens(profile)
    _set_session_cookie(response, token)
    return token


@router.post("/login", response_model=Token)
async def login(
    data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    try:
        profile = await authenticate(db, data.email, data.password)
    except AuthenticationError:
        logger.info("Login failed for %s", data.email)
        raise
    token = issue_tokens(profile)
    _set_session_cookie(response, token)
    return token


@router.post("/refresh", response_model=Token)
async def refresh_token(
    body: TokenRefresh,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    payload = decode_token(body.refresh_token, REFRESH)
    if not payload:
        raise AuthenticationError("Invalid refresh token")
    try:
        user_id = UUID(payload["sub"])
    except ValueError:
        raise AuthenticationError("Invalid refresh token")
    profile = await get_profile_for_refresh(db, user_id)
    if not profile:
        raise AuthenticationError("User not found")
    token = issue_tokens(profile)
    _set_session_cookie(response, token)
    return token


@router.post("/logout", response_model=SuccessResponse)
async def logout(response: Response):
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return SuccessResponse()


@router.get("/session", response_model=SessionResponse)
async def session(
    current_user: Profile = Depends(get_current_user),
    payload: dict | None = Depends(get_token_payload),
):
    return SessionResponse(
        user=profile_to_response(current_user, include_email=True),
        expires_at=token_expires_at(payload) if payload else None,
    )
