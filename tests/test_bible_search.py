import pytest

from app.services.bible_cache import ChapterCache
from app.services.bible_search import (
    FALLBACK_VERSES,
    PassagesResult,
    ResultsResult,
    Unrecognized,
    VersesResult,
    decode_search_payload,
    fallback_verses,
    strip_html,
    to_verses,
)


def test_decode_passages():
    payload = {
        "data": {
            "passages": [
                {"reference": "John 3:16", "content": '<p class="p"><span data-number="16">16</span>For God so loved</p>'}
            ]
        }
    }
    decoded = decode_search_payload(payload)
    assert isinstance(decoded, PassagesResult)
    [verse] = to_verses(decoded)
    assert (verse.book_name, verse.chapter, verse.verse) == ("John", 3, 16)
    assert verse.text == "16For God so loved"
    assert verse.reference == "John 3:16"


def test_decode_verses():
    payload = {"data": {"verses": [{"reference": "1 Samuel 3:4-6", "text": "the LORD called Samuel"}]}}
    decoded = decode_search_payload(payload)
    assert isinstance(decoded, VersesResult)
    [verse] = to_verses(decoded)
    assert (verse.book_name, verse.chapter, verse.verse) == ("1 Samuel", 3, 4)
    assert verse.text == "the LORD called Samuel"


def test_decode_results():
    payload = {"data": {"results": [{"bookname": "Psalms", "chapter": "23", "verse": "1", "text": "The LORD is my shepherd"}]}}
    decoded = decode_search_payload(payload)
    assert isinstance(decoded, ResultsResult)
    [verse] = to_verses(decoded)
    assert verse.reference == "Psalms 23:1"
    assert verse.chapter == 23


@pytest.mark.parametrize(
    "payload, keys",
    [
        ({"data": {"total": 0, "passages": []}}, ["passages", "total"]),
        ({"data": []}, []),
        ({"error": "nope"}, []),
        (None, []),
    ],
)
def test_unrecognized_payloads(payload, keys):
    decoded = decode_search_payload(payload)
    assert decoded == Unrecognized(keys)
    assert to_verses(decoded) == []


def test_missing_fields_use_placeholders():
    [verse] = to_verses(VersesResult([{}]))
    assert verse.book_name == "Unknown"
    assert verse.reference == "Unknown reference"
    assert verse.text == "No text available"


def test_fallback_verses_by_keyword():
    assert [v.reference for v in fallback_verses("shepherd")] == ["Psalms 23:1"]
    assert [v.reference for v in fallback_verses("TRUST")] == ["Proverbs 3:5"]
    assert fallback_verses("zzz") == FALLBACK_VERSES


def test_strip_html():
    assert strip_html("<p>Jesus&nbsp;wept.</p>") == "Jesus wept."
    assert strip_html(None) == ""


@pytest.mark.asyncio
async def test_chapter_cache_loads_once():
    cache: ChapterCache[list[str]] = ChapterCache()
    calls = []

    async def loader():
        calls.append(1)
        return ["verse"]

    assert await cache.get_or_load("John", 3, loader) == ["verse"]
    assert await cache.get_or_load("John", 3, loader) == ["verse"]
    assert len(calls) == 1
    assert "John-3" in cache
    assert len(cache) == 1
    cache.clear()
    assert cache.get("John", 3) is None


@pytest.mark.asyncio
async def test_chapter_cache_does_not_store_failures():
    cache: ChapterCache[list[str]] = ChapterCache()

    async def failing():
        raise RuntimeError("upstream down")

    with pytest.raises(RuntimeError):
        await cache.get_or_load("John", 3, failing)
    assert len(cache) == 0
