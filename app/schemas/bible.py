"""Pydantic schemas for Bible reading and search."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.base import CamelModel


class VerseResponse(BaseModel):
    book_name: str
    chapter: int
    verse: int
    text: str
    reference: str


class SearchResponse(BaseModel):
    verses: list[VerseResponse]
    message: str | None = None


class ChapterResponse(BaseModel):
    reference: str
    verses: list[VerseResponse]


class BookResponse(BaseModel):
    name: str
    chapters: int


class ReferenceResponse(BaseModel):
    book: str
    chapter: int
    verse: int
    reference: str


class SavedVerseCreate(CamelModel):
    reference: str = Field(..., min_length=1, max_length=100)
    text: str = Field(..., min_length=1)


class SavedVerseResponse(CamelModel):
    id: UUID
    reference: str
    text: str
    created_at: datetime
