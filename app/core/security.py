"""Password hashing and session tokens.

Access and refresh tokens are both HS256 JWTs carrying the profile id in
``sub`` and their kind in ``type``; a refresh token is never accepted where
an access token is expected.
"""
from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

ACCESS = "access"
REFRESH = "refresh"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def _encode_token(subject: str | UUID, token_type: str, lifetime: timedelta) -> str:
    claims = {"sub": str(subject), "exp": datetime.now(timezone.utc) + lifetime, "type": token_type}
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(subject: str | UUID, expires_delta: timedelta | None = None) -> str:
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode_token(subject, ACCESS, lifetime)


def create_refresh_token(subject: str | UUID) -> str:
    return _encode_token(subject, REFRESH, timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))


def decode_token(token: str, token_type: str | None = None) -> dict | None:
    """Claims of a valid token, or None when expired, forged or of the wrong kind."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    if not payload.get("sub"):
        return None
    if token_type is not None and payload.get("type") != token_type:
        return None
    return payload


def token_expires_at(payload: dict) -> datetime | None:
    exp = payload.get("exp")
    if exp is None:
        return None
    return datetime.fromtimestamp(int(exp), tz=timezone.utc)
