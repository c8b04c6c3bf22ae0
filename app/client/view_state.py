"""Optimistic view state for the community screens.

Every mutating control (a like button, a join/leave button) owns an
``Affordance``. Running it applies the change locally, sends the request and
then either keeps the change (reconciling with the server's answer) or reverts
it and queues a short message for the user.
"""
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

import httpx

from app.client.api import ApiError, CommunityClient

logger = logging.getLogger(__name__)

LIKE_FAILED = "Failed to update like. Please try again."
MEMBERSHIP_FAILED = "Failed to update group membership. Please try again."
SIGN_IN_TO_LIKE = "Please sign in to like posts"
SIGN_IN_TO_JOIN = "Please sign in to join groups"
VIEW_FAILED = "Could not record topic view"


class AffordanceState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class Affordance:
    def __init__(self, name: str):
        self.name = name
        self.state = AffordanceState.IDLE
        self.error: str | None = None

    @property
    def enabled(self) -> bool:
        return self.state != AffordanceState.PENDING

    async def run(
        self,
        apply: Callable[[], None],
        request: Callable[[], Awaitable[Any]],
        revert: Callable[[], None],
        reconcile: Callable[[Any], None] | None = None,
        failure_message: str = "Something went wrong. Please try again.",
    ) -> bool:
        """Returns True when the change was committed.

        A call made while a previous run is still pending is ignored.
        """
        if self.state == AffordanceState.PENDING:
            logger.debug("%s ignored: request already pending", self.name)
            return False
        self.state = AffordanceState.PENDING
        self.error = None
        apply()
        try:
            response = await request()
        except (ApiError, httpx.HTTPError) as exc:
            logger.error("%s failed: %s", self.name, exc)
            self._roll_back(revert, failure_message)
            return False
        except Exception:
            logger.exception("%s failed unexpectedly", self.name)
            self._roll_back(revert, failure_message)
            return False
        except BaseException:
            # cancelled mid-flight; leave the control usable before propagating
            self._roll_back(revert, failure_message)
            raise
        self.state = AffordanceState.COMMITTED
        if reconcile is not None:
            # the server already accepted the change, so a bad reply keeps it
            try:
                reconcile(response)
            except Exception:
                logger.exception("%s: could not reconcile server response", self.name)
        return True

    def _roll_back(self, revert: Callable[[], None], failure_message: str) -> None:
        self.error = failure_message
        self.state = AffordanceState.ROLLED_BACK
        revert()


class CommunityViewState:
    """Topics, posts and groups as last fetched, plus optimistic edits on top."""

    def __init__(self, client: CommunityClient):
        self.client = client
        self.topics: list[dict] = []
        self.posts: list[dict] = []
        self.groups: list[dict] = []
        self.selected_topic_id: str | None = None
        self.notifications: list[str] = []
        self._affordances: dict[tuple[str, str], Affordance] = {}

    def affordance(self, action: str, key: str) -> Affordance:
        return self._affordances.setdefault((action, key), Affordance(f"{action}:{key}"))

    def _notify(self, message: str) -> None:
        self.notifications.append(message)

    def _find_post(self, post_id: str) -> dict | None:
        for post in self.posts:
            if post["id"] == post_id:
                return post
            for reply in post.get("replies", []):
                if reply["id"] == post_id:
                    return reply
        return None

    def _find_group(self, group_id: str) -> dict | None:
        return next((g for g in self.groups if g["id"] == group_id), None)

    async def load_topics(self, **filters) -> None:
        self.topics = (await self.client.list_topics(**filters))["topics"]

    async def load_groups(self, **filters) -> None:
        self.groups = (await self.client.list_groups(**filters))["groups"]

    async def open_topic(self, topic_id: str) -> None:
        """Select a topic, bump its view count optimistically and load its posts.

        A failed view bump only undoes the local increment; the posts still load.
        """
        self.selected_topic_id = topic_id
        topic = next((t for t in self.topics if t["id"] == topic_id), None)

        def apply():
            if topic is not None:
                topic["views"] = topic.get("views", 0) + 1

        def revert():
            if topic is not None:
                topic["views"] = topic.get("views", 0) - 1

        async def request():
            return await self.client.view_topic(topic_id)

        await self.affordance("view", topic_id).run(apply, request, revert, failure_message=VIEW_FAILED)
        self.posts = await self.client.list_posts(topic_id)

    async def toggle_like(self, post_id: str) -> bool:
        if not self.client.session.is_authenticated:
            self._notify(SIGN_IN_TO_LIKE)
            return False
        post = self._find_post(post_id)
        if post is None:
            return False
        was_liked = post.get("isLiked", False)

        def apply():
            post["isLiked"] = not was_liked
            post["likes"] = post.get("likes", 0) + (-1 if was_liked else 1)

        def revert():
            post["isLiked"] = was_liked
            post["likes"] = post.get("likes", 0) + (1 if was_liked else -1)

        async def request():
            if was_liked:
                return await self.client.unlike_post(post_id)
            return await self.client.like_post(post_id)

        affordance = self.affordance("like", post_id)
        committed = await affordance.run(apply, request, revert, failure_message=LIKE_FAILED)
        if affordance.state == AffordanceState.ROLLED_BACK:
            self._notify(LIKE_FAILED)
        return committed

    async def toggle_membership(self, group_id: str) -> bool:
        if not self.client.session.is_authenticated:
            self._notify(SIGN_IN_TO_JOIN)
            return False
        group = self._find_group(group_id)
        if group is None:
            return False
        was_joined = group.get("isJoined", False)

        def apply():
            group["isJoined"] = not was_joined
            group["membersCount"] = group.get("membersCount", 0) + (-1 if was_joined else 1)

        def revert():
            group["isJoined"] = was_joined
            group["membersCount"] = group.get("membersCount", 0) + (1 if was_joined else -1)

        async def request():
            if was_joined:
                return await self.client.leave_group(group_id)
            return await self.client.join_group(group_id)

        def reconcile(response: dict | None):
            if response and response.get("groupDeactivated"):
                self.groups = [g for g in self.groups if g["id"] != group_id]

        affordance = self.affordance("membership", group_id)
        committed = await affordance.run(apply, request, revert, reconcile, failure_message=MEMBERSHIP_FAILED)
        if committed:
            if was_joined:
                self._notify(f'You have left "{group["name"]}"')
            else:
                self._notify(f'You have joined "{group["name"]}"')
        elif affordance.state == AffordanceState.ROLLED_BACK:
            self._notify(MEMBERSHIP_FAILED)
        return committed
