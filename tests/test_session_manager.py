from datetime import datetime, timedelta, timezone

import httpx
import pytest

from app.client import CommunityClient, SessionManager

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _manager(expires_in: timedelta, refreshed: list):
    async def refresher(refresh_token: str) -> dict:
        refreshed.append(refresh_token)
        return {
            "accessToken": "new-access",
            "refreshToken": "new-refresh",
            "expiresAt": (NOW + timedelta(hours=1)).isoformat().replace("+00:00", "Z"),
        }

    manager = SessionManager(refresher, refresh_lead=timedelta(minutes=5), clock=lambda: NOW)
    manager.update(
        {"accessToken": "old-access", "refreshToken": "old-refresh", "expiresAt": (NOW + expires_in).isoformat()}
    )
    return manager


@pytest.mark.asyncio
async def test_no_refresh_outside_lead_window():
    refreshed = []
    manager = _manager(timedelta(minutes=30), refreshed)
    assert manager.needs_refresh() is False
    assert await manager.access_token_for_request() == "old-access"
    assert refreshed == []


@pytest.mark.asyncio
async def test_refresh_inside_lead_window():
    refreshed = []
    manager = _manager(timedelta(minutes=4), refreshed)
    assert manager.needs_refresh() is True
    assert await manager.access_token_for_request() == "new-access"
    assert refreshed == ["old-refresh"]
    assert manager.refresh_token == "new-refresh"
    assert manager.expires_at == NOW + timedelta(hours=1)
    assert manager.needs_refresh() is False


@pytest.mark.asyncio
async def test_expired_token_is_refreshed():
    refreshed = []
    manager = _manager(timedelta(minutes=-1), refreshed)
    assert await manager.access_token_for_request() == "new-access"


def test_clear_and_unauthenticated():
    manager = SessionManager()
    assert manager.is_authenticated is False
    assert manager.needs_refresh() is False
    manager.update({"accessToken": "a", "refreshToken": "r", "expiresAt": None})
    assert manager.is_authenticated is True
    manager.clear()
    assert manager.access_token is None
    assert manager.refresh_token is None


@pytest.mark.asyncio
async def test_client_refreshes_before_request():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path, request.headers.get("Authorization")))
        if request.url.path.endswith("/auth/refresh"):
            return httpx.Response(
                200,
                json={"accessToken": "fresh", "refreshToken": "r2", "expiresAt": "2099-01-01T00:00:00Z", "user": {}},
            )
        return httpx.Response(200, json={"topics": [], "totalCount": 0})

    api = CommunityClient(http=httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test/api/v1"))
    api.session.update(
        {"accessToken": "stale", "refreshToken": "r1", "expiresAt": datetime.now(timezone.utc).isoformat()}
    )
    await api.list_topics()
    assert seen == [
        ("POST", "/api/v1/auth/refresh", None),
        ("GET", "/api/v1/community/topics", "Bearer fresh"),
    ]
    await api.aclose()
