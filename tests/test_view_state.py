import asyncio

import httpx
import pytest

from app.client import ApiError, Affordance, AffordanceState, CommunityClient, CommunityViewState
from app.client.view_state import LIKE_FAILED, MEMBERSHIP_FAILED, SIGN_IN_TO_LIKE, VIEW_FAILED
from app.main import app


@pytest.mark.asyncio
async def test_affordance_commits_and_reconciles():
    state = {"count": 0}
    seen = []
    affordance = Affordance("like:1")

    async def request():
        return {"count": 41}

    committed = await affordance.run(
        apply=lambda: state.update(count=1),
        request=request,
        revert=lambda: state.update(count=0),
        reconcile=seen.append,
    )
    assert committed is True
    assert affordance.state == AffordanceState.COMMITTED
    assert state == {"count": 1}
    assert seen == [{"count": 41}]


@pytest.mark.asyncio
async def test_affordance_rolls_back_on_failure():
    state = {"liked": False}
    affordance = Affordance("like:1")

    async def request():
        raise ApiError(500, "Failed to add like")

    committed = await affordance.run(
        apply=lambda: state.update(liked=True),
        request=request,
        revert=lambda: state.update(liked=False),
        failure_message=LIKE_FAILED,
    )
    assert committed is False
    assert affordance.state == AffordanceState.ROLLED_BACK
    assert affordance.error == LIKE_FAILED
    assert state == {"liked": False}


@pytest.mark.asyncio
async def test_affordance_rolls_back_on_unexpected_error():
    state = {"joined": False}
    affordance = Affordance("membership:1")

    async def request():
        raise ValueError("malformed JSON body")

    committed = await affordance.run(
        apply=lambda: state.update(joined=True),
        request=request,
        revert=lambda: state.update(joined=False),
        failure_message=MEMBERSHIP_FAILED,
    )
    assert committed is False
    assert affordance.state == AffordanceState.ROLLED_BACK
    assert affordance.enabled is True
    assert affordance.error == MEMBERSHIP_FAILED
    assert state == {"joined": False}


@pytest.mark.asyncio
async def test_affordance_keeps_change_when_reconcile_fails():
    state = {"count": 0}
    affordance = Affordance("like:1")

    async def request():
        return {}

    def reconcile(response):
        raise KeyError("likes")

    committed = await affordance.run(
        apply=lambda: state.update(count=1),
        request=request,
        revert=lambda: state.update(count=0),
        reconcile=reconcile,
    )
    assert committed is True
    assert affordance.state == AffordanceState.COMMITTED
    assert state == {"count": 1}


@pytest.mark.asyncio
async def test_toggle_like_reverts_on_non_json_success_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>gateway</html>")

    api = CommunityClient(http=httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test/api/v1"))
    api.session.update({"accessToken": "token"})
    view = CommunityViewState(api)
    view.posts = [{"id": "p1", "likes": 2, "isLiked": False}]

    assert await view.toggle_like("p1") is False
    assert view.posts[0] == {"id": "p1", "likes": 2, "isLiked": False}
    assert view.affordance("like", "p1").enabled is True
    assert view.notifications == [LIKE_FAILED]


@pytest.mark.asyncio
async def test_open_topic_undoes_view_bump_when_request_fails():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/view"):
            return httpx.Response(500, json={"error": "Internal server error"})
        return httpx.Response(200, json={"posts": [{"id": "p1", "likes": 0, "isLiked": False, "replies": []}]})

    api = CommunityClient(http=httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test/api/v1"))
    view = CommunityViewState(api)
    view.topics = [{"id": "t1", "views": 7}]

    await view.open_topic("t1")
    assert view.topics[0]["views"] == 7
    assert view.selected_topic_id == "t1"
    assert [p["id"] for p in view.posts] == ["p1"]
    affordance = view.affordance("view", "t1")
    assert affordance.state == AffordanceState.ROLLED_BACK
    assert affordance.error == VIEW_FAILED
    assert view.notifications == []


@pytest.mark.asyncio
async def test_affordance_rejects_run_while_pending():
    affordance = Affordance("membership:1")
    release = asyncio.Event()
    applied = []

    async def slow_request():
        await release.wait()
        return None

    first = asyncio.create_task(affordance.run(lambda: applied.append(1), slow_request, lambda: None))
    await asyncio.sleep(0)
    assert affordance.state == AffordanceState.PENDING
    assert affordance.enabled is False

    second = await affordance.run(lambda: applied.append(2), slow_request, lambda: None)
    assert second is False
    assert applied == [1]

    release.set()
    assert await first is True
    assert affordance.enabled is True


def _failing_transport(status: int):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={"error": "Failed to add like"})

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_toggle_like_reverts_and_notifies_on_server_error():
    api = CommunityClient(http=httpx.AsyncClient(transport=_failing_transport(500), base_url="http://test/api/v1"))
    api.session.update({"accessToken": "token", "refreshToken": "refresh"})
    view = CommunityViewState(api)
    view.posts = [{"id": "p1", "likes": 3, "isLiked": False, "replies": [{"id": "r1", "likes": 0, "isLiked": False}]}]

    assert await view.toggle_like("p1") is False
    assert view.posts[0]["likes"] == 3
    assert view.posts[0]["isLiked"] is False
    assert view.notifications == [LIKE_FAILED]

    assert await view.toggle_like("r1") is False
    assert view.posts[0]["replies"][0] == {"id": "r1", "likes": 0, "isLiked": False}


@pytest.mark.asyncio
async def test_toggle_requires_sign_in():
    api = CommunityClient(http=httpx.AsyncClient(transport=_failing_transport(500), base_url="http://test/api/v1"))
    view = CommunityViewState(api)
    view.posts = [{"id": "p1", "likes": 0, "isLiked": False}]
    assert await view.toggle_like("p1") is False
    assert view.notifications == [SIGN_IN_TO_LIKE]
    assert view.posts[0]["likes"] == 0


@pytest.mark.asyncio
async def test_toggle_membership_reverts_on_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    api = CommunityClient(http=httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test/api/v1"))
    api.session.update({"accessToken": "token"})
    view = CommunityViewState(api)
    view.groups = [{"id": "g1", "name": "Study", "isJoined": False, "membersCount": 4}]

    assert await view.toggle_membership("g1") is False
    assert view.groups[0]["isJoined"] is False
    assert view.groups[0]["membersCount"] == 4
    assert view.notifications == [MEMBERSHIP_FAILED]


@pytest.mark.asyncio
async def test_view_state_against_live_api(client):
    # `client` installs the per-test database override
    http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test/api/v1")
    async with CommunityClient(http=http) as api:
        await api.register("naomi@example.com", "moab-to-bethlehem", "Naomi")
        topic = await api.create_topic("Ruth 1", "Loyalty", "Bible Study", "ruth, loyalty")
        post = await api.create_post(topic["id"], "Where you go I will go")

        view = CommunityViewState(api)
        await view.load_topics()
        assert [t["title"] for t in view.topics] == ["Ruth 1"]

        await view.open_topic(topic["id"])
        assert view.topics[0]["views"] == 1
        assert [p["id"] for p in view.posts] == [post["id"]]

        assert await view.toggle_like(post["id"]) is True
        assert view.posts[0]["likes"] == 1
        assert view.posts[0]["isLiked"] is True
        assert await view.toggle_like(post["id"]) is True
        assert view.posts[0]["likes"] == 0

        fresh = await api.list_posts(topic["id"])
        assert (fresh[0]["likes"], fresh[0]["isLiked"]) == (0, False)

        group = await api.create_group("Ruth study", "Reading Ruth together", "Bible Study")
        await view.load_groups()
        assert view.groups[0]["id"] == group["id"]
        # sole member leaving deactivates the group, which drops out of the view
        assert await view.toggle_membership(group["id"]) is True
        assert view.groups == []
        assert view.notifications == ['You have left "Ruth study"']
