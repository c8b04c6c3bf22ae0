"""Canonical book list and "{book} {chapter}:{verse}" reference handling."""
import re
from typing import NamedTuple

from app.core.exceptions import ValidationError

# Protestant canon in order, with chapter counts.
BOOKS: dict[str, int] = {
    "Genesis": 50,
    "Exodus": 40,
    "Leviticus": 27,
    "Numbers": 36,
    "Deuteronomy": 34,
    "Joshua": 24,
    "Judges": 21,
    "Ruth": 4,
    "1 Samuel": 31,
    "2 Samuel": 24,
    "1 Kings": 22,
    "2 Kings": 25,
    "1 Chronicles": 29,
    "2 Chronicles": 36,
    "Ezra": 10,
    "Nehemiah": 13,
    "Esther": 10,
    "Job": 42,
    "Psalms": 150,
    "Proverbs": 31,
    "Ecclesiastes": 12,
    "Song of Solomon": 8,
    "Isaiah": 66,
    "Jeremiah": 52,
    "Lamentations": 5,
    "Ezekiel": 48,
    "Daniel": 12,
    "Hosea": 14,
    "Joel": 3,
    "Amos": 9,
    "Obadiah": 1,
    "Jonah": 4,
    "Micah": 7,
    "Nahum": 3,
    "Habakkuk": 3,
    "Zephaniah": 3,
    "Haggai": 2,
    "Zechariah": 14,
    "Malachi": 4,
    "Matthew": 28,
    "Mark": 16,
    "Luke": 24,
    "John": 21,
    "Acts": 28,
    "Romans": 16,
    "1 Corinthians": 16,
    "2 Corinthians": 13,
    "Galatians": 6,
    "Ephesians": 6,
    "Philippians": 4,
    "Colossians": 4,
    "1 Thessalonians": 5,
    "2 Thessalonians": 3,
    "1 Timothy": 6,
    "2 Timothy": 4,
    "Titus": 3,
    "Philemon": 1,
    "Hebrews": 13,
    "James": 5,
    "1 Peter": 5,
    "2 Peter": 3,
    "1 John": 5,
    "2 John": 1,
    "3 John": 1,
    "Jude": 1,
    "Revelation": 22,
}

_ALIASES = {
    "psalm": "Psalms",
    "song of songs": "Song of Solomon",
    "revelations": "Revelation",
}
_BY_LOWER = {name.lower(): name for name in BOOKS}

DEFAULT_CHAPTER_COUNT = 5

_REFERENCE_RE = re.compile(
    r"^\s*(?P<book>.+?)\s+(?P<chapter>\d+)(?:\s*:\s*(?P<verse>\d+)(?:\s*-\s*\d+)?)?\s*$"
)


class BibleReference(NamedTuple):
    book: str
    chapter: int
    verse: int

    def __str__(self) -> str:
        return format_reference(self.book, self.chapter, self.verse)


def normalize_book(name: str) -> str | None:
    """Canonical spelling of a book name, or None when it is not one of the 66."""
    key = " ".join(name.split()).lower()
    return _BY_LOWER.get(key) or _ALIASES.get(key)


def chapter_count(book: str) -> int:
    canonical = normalize_book(book)
    return BOOKS[canonical] if canonical else DEFAULT_CHAPTER_COUNT


def format_reference(book: str, chapter: int, verse: int) -> str:
    return f"{book} {chapter}:{verse}"


def parse_reference(reference: str) -> BibleReference:
    """Split "1 Samuel 1:1" into its parts.

    A verse range ("John 3:16-18") keeps its first verse; a missing verse or
    chapter defaults to 1. Known books come back in canonical spelling.
    """
    if not reference or not reference.strip():
        raise ValidationError("Reference is required")
    match = _REFERENCE_RE.match(reference)
    if match:
        book = match.group("book")
        chapter = int(match.group("chapter"))
        verse = int(match.group("verse") or 1)
    else:
        book, chapter, verse = reference.strip(), 1, 1
    if ":" in book:
        raise ValidationError("Invalid reference", details=reference)
    book = " ".join(book.split())
    return BibleReference(normalize_book(book) or book, chapter, verse)
