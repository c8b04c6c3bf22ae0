"""Async HTTP client for the community API."""
import logging
from typing import Any
from uuid import UUID

import httpx

from app.client.session import SessionManager

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response. ``error`` is the server's short message."""

    def __init__(self, status: int, error: str, details: str | None = None):
        self.status = status
        self.error = error
        self.details = details
        super().__init__(f"{status}: {error}")


class CommunityClient:
    DEFAULT_BASE_URL = "http://localhost:8000/api/v1"

    def __init__(
        self,
        base_url: str | None = None,
        *,
        http: httpx.AsyncClient | None = None,
        session: SessionManager | None = None,
        timeout: float = 30.0,
    ):
        self._http = http or httpx.AsyncClient(base_url=base_url or self.DEFAULT_BASE_URL, timeout=timeout)
        self.session = session or SessionManager()
        self.session.set_refresher(self._refresh)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @staticmethod
    def _raise_for_error(response: httpx.Response) -> None:
        if response.status_code < 400:
            return
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        raise ApiError(
            response.status_code,
            body.get("error") or response.reason_phrase or f"HTTP {response.status_code}",
            body.get("details"),
        )

    async def _request(self, method: str, path: str, *, auth: bool = True, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if auth:
            token = await self.session.access_token_for_request()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        response = await self._http.request(method, path, headers=headers, **kwargs)
        self._raise_for_error(response)
        if not response.content:
            return None
        return response.json()

    # Auth

    async def _refresh(self, refresh_token: str) -> dict:
        return await self._request("POST", "/auth/refresh", auth=False, json={"refreshToken": refresh_token})

    async def register(self, email: str, password: str, display_name: str | None = None) -> dict:
        data = await self._request(
            "POST",
            "/auth/register",
            auth=False,
            json={"email": email, "password": password, "displayName": display_name},
        )
        self.session.update(data)
        return data["user"]

    async def login(self, email: str, password: str) -> dict:
        data = await self._request("POST", "/auth/login", auth=False, json={"email": email, "password": password})
        self.session.update(data)
        return data["user"]

    async def logout(self) -> None:
        try:
            await self._request("POST", "/auth/logout", auth=False)
        finally:
            self.session.clear()

    # Topics and posts

    async def list_topics(
        self,
        *,
        category: str | None = None,
        search: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> dict:
        params: dict[str, Any] = {"limit": limit, "offset": offset}
        if category:
            params["category"] = category
        if search:
            params["search"] = search
        return await self._request("GET", "/community/topics", params=params)

    async def get_topic(self, topic_id: UUID | str) -> dict:
        return await self._request("GET", f"/community/topics/{topic_id}")

    async def view_topic(self, topic_id: UUID | str) -> dict:
        return await self._request("POST", f"/community/topics/{topic_id}/view")

    async def create_topic(self, title: str, description: str, category: str, tags: list[str] | str | None = None) -> dict:
        body = {"title": title, "description": description, "category": category, "tags": tags}
        return (await self._request("POST", "/community/topics", json=body))["topic"]

    async def list_posts(self, topic_id: UUID | str) -> list[dict]:
        return (await self._request("GET", "/community/posts", params={"topicId": str(topic_id)}))["posts"]

    async def create_post(self, topic_id: UUID | str, content: str, parent_id: UUID | str | None = None) -> dict:
        body = {"topicId": str(topic_id), "content": content, "parentId": str(parent_id) if parent_id else None}
        return (await self._request("POST", "/community/posts", json=body))["post"]

    async def like_post(self, post_id: UUID | str) -> dict:
        return await self._request("POST", "/community/likes", json={"postId": str(post_id)})

    async def unlike_post(self, post_id: UUID | str) -> dict:
        return await self._request("DELETE", "/community/likes", params={"postId": str(post_id)})

    # Groups

    async def list_groups(self, *, category: str | None = None, limit: int = 10, offset: int = 0) -> dict:
        params: dict[str, Any] = {"limit": limit, "offset": offset}
        if category:
            params["category"] = category
        return await self._request("GET", "/community/groups", params=params)

    async def create_group(self, name: str, description: str, category: str, schedule: str | None = None) -> dict:
        body = {"name": name, "description": description, "category": category, "schedule": schedule}
        return (await self._request("POST", "/community/groups", json=body))["group"]

    async def join_group(self, group_id: UUID | str) -> dict:
        return await self._request("POST", f"/community/groups/{group_id}/members")

    async def leave_group(self, group_id: UUID | str) -> dict:
        return await self._request("DELETE", f"/community/groups/{group_id}/members")

    # Bible

    async def search_bible(self, query: str) -> dict:
        return await self._request("GET", "/bible/search", auth=False, params={"q": query})
