"""Decoding of Bible search payloads.

The search API answers in one of several shapes (``passages``, ``verses`` or
``results`` under ``data``). Each shape is a variant below; anything else is
``Unrecognized`` and callers fall back to sample verses.
"""
import html
import re
from dataclasses import dataclass, field
from typing import Any

from app.services.bible_reference import format_reference, normalize_book

_TAG_RE = re.compile(r"<[^>]*>?")
_CHAPTER_VERSE_RE = re.compile(r"(\d+):(\d+)")


@dataclass(frozen=True)
class Verse:
    book_name: str
    chapter: int
    verse: int
    text: str
    reference: str


@dataclass(frozen=True)
class PassagesResult:
    passages: list[dict[str, Any]]


@dataclass(frozen=True)
class VersesResult:
    verses: list[dict[str, Any]]


@dataclass(frozen=True)
class ResultsResult:
    results: list[dict[str, Any]]


@dataclass(frozen=True)
class Unrecognized:
    keys: list[str] = field(default_factory=list)


SearchPayload = PassagesResult | VersesResult | ResultsResult | Unrecognized


FALLBACK_VERSES = [
    Verse("John", 3, 16, "For God so loved the world, that he gave his only Son, that whoever believes in him should not perish but have eternal life.", "John 3:16"),
    Verse("Romans", 8, 28, "And we know that for those who love God all things work together for good, for those who are called according to his purpose.", "Romans 8:28"),
    Verse("Philippians", 4, 13, "I can do all things through him who strengthens me.", "Philippians 4:13"),
    Verse("Psalms", 23, 1, "The LORD is my shepherd; I shall not want.", "Psalms 23:1"),
    Verse("Proverbs", 3, 5, "Trust in the LORD with all your heart, and do not lean on your own understanding.", "Proverbs 3:5"),
]
_FALLBACK_KEYWORDS = [
    (("love", "god", "world"), 0),
    (("good", "purpose"), 1),
    (("strength", "can"), 2),
    (("shepherd", "lord"), 3),
    (("trust", "heart"), 4),
]
FALLBACK_MESSAGE = "Using sample verses as the API returned an unexpected response format."


def strip_html(text: str | None) -> str:
    if not text:
        return ""
    return html.unescape(_TAG_RE.sub("", text)).replace("\xa0", " ").strip()


def fallback_verses(query: str) -> list[Verse]:
    """Sample verses picked by keyword; all of them when nothing matches."""
    lowered = query.lower()
    for keywords, index in _FALLBACK_KEYWORDS:
        if any(k in lowered for k in keywords):
            return [FALLBACK_VERSES[index]]
    return list(FALLBACK_VERSES)


def decode_search_payload(payload: Any) -> SearchPayload:
    match payload:
        case {"data": {"passages": [_, *_] as passages}}:
            return PassagesResult(passages)
        case {"data": {"verses": [_, *_] as verses}}:
            return VersesResult(verses)
        case {"data": {"results": [_, *_] as results}}:
            return ResultsResult(results)
        case {"data": dict(data)}:
            return Unrecognized(sorted(data))
        case _:
            return Unrecognized()


def _split_reference(reference: str) -> tuple[str, int, int]:
    """Book, chapter, verse out of an API reference like "1 Samuel 3:4-6"."""
    head, _, tail = reference.partition(":")
    parts = head.strip().split(" ")
    if len(parts) > 1 and parts[-1].isdigit():
        book, chapter = " ".join(parts[:-1]), int(parts[-1])
    else:
        book, chapter = head.strip(), 1
    verse_text = tail.strip().split("-")[0].strip()
    verse = int(verse_text) if verse_text.isdigit() else 1
    return normalize_book(book) or book or "Unknown", chapter, verse


def _from_passage(passage: dict[str, Any]) -> Verse:
    reference = passage.get("reference") or ""
    book, chapter, verse = _split_reference(reference) if reference else ("Unknown", 1, 1)
    found = _CHAPTER_VERSE_RE.search(reference)
    if found:
        chapter, verse = int(found.group(1)), int(found.group(2))
    return Verse(book, chapter, verse, strip_html(passage.get("content") or "No content available"), reference or "Unknown reference")


def _from_verse(item: dict[str, Any]) -> Verse:
    reference = item.get("reference") or ""
    book, chapter, verse = _split_reference(reference) if reference else ("Unknown", 1, 1)
    return Verse(book, chapter, verse, strip_html(item.get("text") or "No text available"), reference or "Unknown reference")


def _from_result(item: dict[str, Any]) -> Verse:
    book = item.get("bookname") or "Unknown"
    chapter = int(item.get("chapter") or 1)
    verse = int(item.get("verse") or 1)
    return Verse(book, chapter, verse, strip_html(item.get("text") or "No text available"), format_reference(book, chapter, verse))


def to_verses(decoded: SearchPayload) -> list[Verse]:
    match decoded:
        case PassagesResult(passages):
            return [_from_passage(p) for p in passages]
        case VersesResult(verses):
            return [_from_verse(v) for v in verses]
        case ResultsResult(results):
            return [_from_result(r) for r in results]
        case Unrecognized():
            return []
