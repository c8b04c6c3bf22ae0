import httpx
import pytest

from app.api.deps import get_bible_client
from app.core.exceptions import UpstreamError, ValidationError
from app.main import app
from app.services.bible_cache import ChapterCache
from app.services.bible_client import BibleClient
from app.services.bible_search import FALLBACK_MESSAGE

BASE = "https://bible.test/v1"


class FakeBibleApi:
    """Minimal stand-in for the upstream content API."""

    def __init__(self, search_payload=None, fail=False):
        self.search_payload = search_payload or {"data": {"passages": []}}
        self.fail = fail
        self.calls: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append(path)
        assert request.headers["api-key"] == "test-key"
        if self.fail:
            return httpx.Response(500, json={"message": "boom"})
        if path.endswith("/search"):
            return httpx.Response(200, json=self.search_payload)
        if path.endswith("/books"):
            return httpx.Response(
                200,
                json={
                    "data": [
                        {"id": "JHN", "name": "John", "nameLong": "The Gospel According to John", "abbreviation": "Jhn"},
                        {"id": "1SA", "name": "1 Samuel", "nameLong": "The First Book of Samuel", "abbreviation": "1Sa"},
                    ]
                },
            )
        if path.endswith("/chapters/JHN.11/verses"):
            return httpx.Response(200, json={"data": [{"id": "JHN.11.35"}, {"id": "JHN.11.36"}]})
        if "/verses/JHN.11." in path:
            number = path.rsplit(".", 1)[-1]
            return httpx.Response(200, json={"data": {"content": f"<p><span>{number}</span>Jesus wept.</p>"}})
        return httpx.Response(404, json={"message": "not found"})

    def count(self, suffix: str) -> int:
        return sum(1 for path in self.calls if path.endswith(suffix))


def make_client(api: FakeBibleApi, cache: ChapterCache | None = None) -> BibleClient:
    http = httpx.AsyncClient(
        transport=httpx.MockTransport(api), base_url=BASE, headers={"api-key": "test-key"}
    )
    return BibleClient(http=http, cache=cache, bible_id="test-bible")


@pytest.mark.asyncio
async def test_search_decodes_upstream_payload():
    api = FakeBibleApi({"data": {"verses": [{"reference": "John 11:35", "text": "Jesus wept."}]}})
    client = make_client(api)
    outcome = await client.search("wept")
    assert outcome.message is None
    assert [v.reference for v in outcome.verses] == ["John 11:35"]
    assert api.calls == ["/v1/bibles/test-bible/search"]
    await client.aclose()


@pytest.mark.asyncio
async def test_search_falls_back_on_unrecognized_payload():
    client = make_client(FakeBibleApi({"data": {"total": 0}}))
    outcome = await client.search("shepherd")
    assert outcome.message == FALLBACK_MESSAGE
    assert [v.reference for v in outcome.verses] == ["Psalms 23:1"]


@pytest.mark.asyncio
async def test_search_falls_back_on_upstream_error():
    client = make_client(FakeBibleApi(fail=True))
    outcome = await client.search("love")
    assert outcome.message.startswith("An error occurred")
    assert [v.reference for v in outcome.verses] == ["John 3:16"]


@pytest.mark.asyncio
async def test_search_requires_query():
    client = make_client(FakeBibleApi())
    with pytest.raises(ValidationError):
        await client.search("  ")


@pytest.mark.asyncio
async def test_chapter_is_fetched_once_then_cached():
    api = FakeBibleApi()
    cache = ChapterCache()
    client = make_client(api, cache)

    verses = await client.get_chapter("john", 11)
    assert [(v.verse, v.text, v.reference) for v in verses] == [
        (35, "35Jesus wept.", "John 11:35"),
        (36, "36Jesus wept.", "John 11:36"),
    ]
    again = await client.get_chapter("John", 11)
    assert again == verses
    assert api.count("/chapters/JHN.11/verses") == 1
    assert api.count("/books") == 1
    assert "John-11" in cache


@pytest.mark.asyncio
async def test_chapter_validation_and_upstream_failure():
    client = make_client(FakeBibleApi(fail=True))
    with pytest.raises(ValidationError):
        await client.get_chapter("Hezekiah", 1)
    with pytest.raises(ValidationError):
        await client.get_chapter("John", 22)
    with pytest.raises(UpstreamError):
        await client.get_chapter("John", 11)
    assert len(client.cache) == 0


@pytest.mark.asyncio
async def test_chapter_for_book_missing_upstream():
    client = make_client(FakeBibleApi())
    with pytest.raises(UpstreamError):
        await client.get_chapter("Genesis", 1)


@pytest.fixture
def fake_api():
    api = FakeBibleApi({"data": {"passages": [{"reference": "John 11:35", "content": "<p>Jesus wept.</p>"}]}})
    client = make_client(api)
    app.dependency_overrides[get_bible_client] = lambda: client
    yield api
    app.dependency_overrides.pop(get_bible_client, None)


@pytest.mark.asyncio
async def test_bible_endpoints(client, fake_api):
    response = await client.get("/api/v1/bible/search", params={"q": "wept"})
    assert response.status_code == 200
    assert response.json() == {
        "verses": [
            {"book_name": "John", "chapter": 11, "verse": 35, "text": "Jesus wept.", "reference": "John 11:35"}
        ],
        "message": None,
    }

    response = await client.get("/api/v1/bible/search")
    assert response.status_code == 400
    assert response.json() == {"error": "Query parameter is required"}

    response = await client.get("/api/v1/bible/chapter", params={"book": "John", "chapter": 11})
    assert response.status_code == 200
    assert response.json()["reference"] == "John 11"
    assert len(response.json()["verses"]) == 2

    response = await client.get("/api/v1/bible/chapter", params={"book": "Hezekiah", "chapter": 1})
    assert response.status_code == 400

    response = await client.get("/api/v1/bible/chapter", params={"book": "1 Samuel", "chapter": 1})
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to load chapter"}

    books = (await client.get("/api/v1/bible/books")).json()
    assert len(books) == 66
    assert books[0] == {"name": "Genesis", "chapters": 50}

    response = await client.get("/api/v1/bible/reference", params={"ref": "psalm 23"})
    assert response.json() == {"book": "Psalms", "chapter": 23, "verse": 1, "reference": "Psalms 23:1"}
    response = await client.get("/api/v1/bible/reference")
    assert response.status_code == 400
