from datetime import timedelta

import pytest

from app.core.security import create_access_token, create_refresh_token
from conftest import auth_headers, session_cookie


@pytest.mark.asyncio
async def test_register_login_and_session(client):
    response = await client.post(
        "/api/v1/auth/register", json={"email": "Ruth@Example.com", "password": "whither-thou-goest"}
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["tokenType"] == "bearer"
    assert data["user"]["email"] == "ruth@example.com"
    assert data["user"]["displayName"] == "ruth"
    assert "session=" in response.headers["set-cookie"]
    assert "httponly" in response.headers["set-cookie"].lower()

    response = await client.post(
        "/api/v1/auth/register", json={"email": "ruth@example.com", "password": "another-password"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Email already registered"}

    response = await client.post("/api/v1/auth/login", json={"email": "ruth@example.com", "password": "wrong-password"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}

    response = await client.post(
        "/api/v1/auth/login", json={"email": "ruth@example.com", "password": "whither-thou-goest"}
    )
    assert response.status_code == 200
    tokens = response.json()

    response = await client.get(
        "/api/v1/auth/session", headers={"Authorization": f"Bearer {tokens['accessToken']}"}
    )
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "ruth@example.com"
    assert response.json()["expiresAt"] is not None

    response = await client.post("/api/v1/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert response.status_code == 200
    assert response.json()["user"]["id"] == tokens["user"]["id"]

    response = await client.post("/api/v1/auth/refresh", json={"refreshToken": tokens["accessToken"]})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_session_cookie_authenticates(client, create_profile):
    alice = await create_profile("Alice")
    response = await client.get("/api/v1/auth/session", headers=session_cookie(alice))
    assert response.status_code == 200
    assert response.json()["user"]["id"] == str(alice.id)

    response = await client.post(
        "/api/v1/community/topics",
        json={"title": "Cookie topic", "description": "d", "category": "Family"},
        headers=session_cookie(alice),
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_missing_or_bad_session_is_401(client, create_profile):
    alice = await create_profile()
    assert (await client.get("/api/v1/auth/session")).status_code == 401

    expired = create_access_token(alice.id, expires_delta=timedelta(minutes=-1))
    response = await client.get("/api/v1/auth/session", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}

    refresh = create_refresh_token(alice.id)
    response = await client.get("/api/v1/auth/session", headers={"Authorization": f"Bearer {refresh}"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_clears_cookie(client):
    response = await client.post("/api/v1/auth/logout")
    assert response.json() == {"success": True}
    assert 'session=""' in response.headers["set-cookie"] or "Max-Age=0" in response.headers["set-cookie"]


@pytest.mark.asyncio
async def test_profiles(client, create_profile):
    alice = await create_profile("Alice", avatar_url="https://cdn.test/alice.png")
    nameless = await create_profile(None)

    response = await client.put(
        "/api/v1/profiles/me", json={"displayName": "Alice B."}, headers=auth_headers(alice)
    )
    assert response.status_code == 200
    assert response.json()["displayName"] == "Alice B."

    me = (await client.get("/api/v1/profiles/me", headers=auth_headers(alice))).json()
    assert me["email"] == alice.email

    public = (await client.get(f"/api/v1/profiles/{alice.id}")).json()
    assert public == {"id": str(alice.id), "name": "Alice B.", "avatar": "https://cdn.test/alice.png"}

    public = (await client.get(f"/api/v1/profiles/{nameless.id}")).json()
    assert public["name"] == "Unknown"
    assert public["avatar"].endswith("query=UK")

    response = await client.get("/api/v1/profiles/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404
