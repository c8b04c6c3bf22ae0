"""Client for the Bible content API (api.bible-compatible)."""
import asyncio
import logging
from dataclasses import dataclass

import httpx

from app.core.config import settings
from app.core.exceptions import UpstreamError, ValidationError
from app.services.bible_cache import ChapterCache
from app.services.bible_reference import chapter_count, format_reference, normalize_book
from app.services.bible_search import (
    FALLBACK_MESSAGE,
    Unrecognized,
    Verse,
    decode_search_payload,
    fallback_verses,
    strip_html,
    to_verses,
)

logger = logging.getLogger(__name__)


@dataclass
class SearchOutcome:
    verses: list[Verse]
    message: str | None = None


class BibleClient:
    """Search and chapter reads for one translation.

    Chapters go through the injected ``ChapterCache``; the book-id index is
    fetched once per client.
    """

    def __init__(
        self,
        *,
        http: httpx.AsyncClient | None = None,
        cache: ChapterCache[list[Verse]] | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
        bible_id: str | None = None,
        timeout: float | None = None,
    ):
        self._bible_id = bible_id or settings.BIBLE_ID
        self._http = http or httpx.AsyncClient(
            base_url=(base_url or settings.BIBLE_API_URL).rstrip("/"),
            headers={"api-key": api_key if api_key is not None else settings.BIBLE_API_KEY},
            timeout=timeout or settings.BIBLE_API_TIMEOUT,
        )
        self.cache = cache if cache is not None else ChapterCache()
        self._book_ids: dict[str, str] | None = None

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _get_json(self, path: str, **params) -> dict:
        response = await self._http.get(path, params=params or None)
        response.raise_for_status()
        return response.json()

    async def search(self, query: str) -> SearchOutcome:
        """Search verses. Upstream failures and unknown payloads fall back to sample verses."""
        if not query or not query.strip():
            raise ValidationError("Query parameter is required")
        try:
            payload = await self._get_json(f"/bibles/{self._bible_id}/search", query=query)
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Bible search failed for %r: %s", query, exc)
            return SearchOutcome(
                fallback_verses(query),
                "An error occurred while searching the Bible. Using sample verses instead.",
            )
        decoded = decode_search_payload(payload)
        if isinstance(decoded, Unrecognized):
            logger.warning("Unexpected search payload for %r (keys: %s)", query, decoded.keys)
            return SearchOutcome(fallback_verses(query), FALLBACK_MESSAGE)
        return SearchOutcome(to_verses(decoded))

    async def _book_index(self) -> dict[str, str]:
        if self._book_ids is None:
            data = await self._get_json(f"/bibles/{self._bible_id}/books")
            index: dict[str, str] = {}
            for book in data.get("data", []):
                for label in (book.get("name"), book.get("nameLong"), book.get("abbreviation")):
                    if label:
                        index[label.lower()] = book["id"]
            self._book_ids = index
        return self._book_ids

    async def _load_chapter(self, book: str, chapter: int) -> list[Verse]:
        try:
            book_id = (await self._book_index()).get(book.lower())
            if book_id is None:
                raise UpstreamError("Failed to load chapter", details=f"Book not found: {book}")
            listing = await self._get_json(f"/bibles/{self._bible_id}/chapters/{book_id}.{chapter}/verses")
            verse_ids = [v["id"] for v in listing.get("data", [])]
            contents = await asyncio.gather(
                *(self._get_json(f"/bibles/{self._bible_id}/verses/{vid}") for vid in verse_ids)
            )
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            logger.exception("Bible chapter fetch error for %s %s", book, chapter)
            raise UpstreamError("Failed to load chapter", details=str(exc))

        verses = []
        for verse_id, content in zip(verse_ids, contents):
            number = int(verse_id.split(".")[-1])
            verses.append(
                Verse(
                    book_name=book,
                    chapter=chapter,
                    verse=number,
                    text=strip_html(content.get("data", {}).get("content")),
                    reference=format_reference(book, chapter, number),
                )
            )
        return verses

    async def get_chapter(self, book: str, chapter: int) -> list[Verse]:
        canonical = normalize_book(book)
        if canonical is None:
            raise ValidationError("Unknown book", details=book)
        if not 1 <= chapter <= chapter_count(canonical):
            raise ValidationError("Chapter out of range", details=f"{canonical} has {chapter_count(canonical)} chapters")
        return await self.cache.get_or_load(canonical, chapter, lambda: self._load_chapter(canonical, chapter))
