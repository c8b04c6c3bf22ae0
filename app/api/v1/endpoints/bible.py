"""Bible reading and search endpoints."""
from fastapi import APIRouter, Depends, Query

from app.api.deps import get_bible_client
from app.core.exceptions import ValidationError
from app.schemas.bible import BookResponse, ChapterResponse, ReferenceResponse, SearchResponse, VerseResponse
from app.services.bible_client import BibleClient
from app.services.bible_reference import BOOKS, normalize_book, parse_reference

router = APIRouter(prefix="/bible", tags=["bible"])


def _verse_response(verse) -> VerseResponse:
    return VerseResponse(
        book_name=verse.book_name,
        chapter=verse.chapter,
        verse=verse.verse,
        text=verse.text,
        reference=verse.reference,
    )


@router.get("/search", response_model=SearchResponse)
async def search(
    q: str | None = None,
    client: BibleClient = Depends(get_bible_client),
):
    if not q or not q.strip():
        raise ValidationError("Query parameter is required")
    outcome = await client.search(q)
    return SearchResponse(verses=[_verse_response(v) for v in outcome.verses], message=outcome.message)


@router.get("/chapter", response_model=ChapterResponse)
async def chapter(
    book: str | None = None,
    chapter: int = Query(1, ge=1),
    client: BibleClient = Depends(get_bible_client),
):
    if not book or not book.strip():
        raise ValidationError("Book parameter is required")
    verses = await client.get_chapter(book, chapter)
    return ChapterResponse(
        reference=f"{normalize_book(book)} {chapter}",
        verses=[_verse_response(v) for v in verses],
    )


@router.get("/books", response_model=list[BookResponse])
async def books():
    return [BookResponse(name=name, chapters=count) for name, count in BOOKS.items()]


@router.get("/reference", response_model=ReferenceResponse)
async def reference(ref: str | None = None):
    parsed = parse_reference(ref or "")
    return ReferenceResponse(book=parsed.book, chapter=parsed.chapter, verse=parsed.verse, reference=str(parsed))
