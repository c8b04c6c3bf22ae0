"""Client-side session: token storage and proactive refresh."""
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone

from app.core.config import settings

logger = logging.getLogger(__name__)

Refresher = Callable[[str], Awaitable[dict]]


def _parse_expiry(value) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        expires_at = value
    else:
        expires_at = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at


class SessionManager:
    """Holds the access/refresh pair and refreshes shortly before expiry.

    Refresh is not coordinated with in-flight requests: a request that races
    an expiry gets a 401 like any other failure.
    """

    def __init__(
        self,
        refresher: Refresher | None = None,
        refresh_lead: timedelta | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._refresher = refresher
        self.refresh_lead = refresh_lead or timedelta(seconds=settings.SESSION_REFRESH_LEAD_SECONDS)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.access_token: str | None = None
        self.refresh_token: str | None = None
        self.expires_at: datetime | None = None
        self.user: dict | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    def set_refresher(self, refresher: Refresher) -> None:
        self._refresher = refresher

    def update(self, payload: dict) -> None:
        """Store tokens from an auth response body (camelCase keys)."""
        self.access_token = payload["accessToken"]
        self.refresh_token = payload.get("refreshToken", self.refresh_token)
        self.expires_at = _parse_expiry(payload.get("expiresAt"))
        self.user = payload.get("user", self.user)

    def clear(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.expires_at = None
        self.user = None

    def needs_refresh(self) -> bool:
        if not self.access_token or self.expires_at is None or not self.refresh_token:
            return False
        return self.expires_at - self._clock() <= self.refresh_lead

    async def access_token_for_request(self) -> str | None:
        if self.needs_refresh() and self._refresher is not None:
            logger.debug("Refreshing session expiring at %s", self.expires_at)
            self.update(await self._refresher(self.refresh_token))
        return self.access_token
