import pytest

from app.core.exceptions import ValidationError
from app.services.bible_reference import (
    BOOKS,
    DEFAULT_CHAPTER_COUNT,
    BibleReference,
    chapter_count,
    format_reference,
    normalize_book,
    parse_reference,
)


def test_canon_has_66_books():
    assert len(BOOKS) == 66
    assert list(BOOKS)[0] == "Genesis"
    assert list(BOOKS)[-1] == "Revelation"


@pytest.mark.parametrize("book", list(BOOKS))
def test_round_trip_every_book(book):
    last = BOOKS[book]
    for chapter, verse in ((1, 1), (last, 7)):
        text = format_reference(book, chapter, verse)
        assert parse_reference(text) == (book, chapter, verse)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1 Samuel 1:1", ("1 Samuel", 1, 1)),
        ("John 3:16-18", ("John", 3, 16)),
        ("John 3", ("John", 3, 1)),
        ("Genesis", ("Genesis", 1, 1)),
        ("  song of solomon   2 : 4 ", ("Song of Solomon", 2, 4)),
        ("psalm 23", ("Psalms", 23, 1)),
        ("Revelations 21:4", ("Revelation", 21, 4)),
        ("Hezekiah 4:2", ("Hezekiah", 4, 2)),
    ],
)
def test_parse_reference(text, expected):
    assert parse_reference(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "John:3"])
def test_parse_reference_rejects_bad_input(text):
    with pytest.raises(ValidationError):
        parse_reference(text)


def test_reference_str_formats():
    assert str(BibleReference("3 John", 1, 14)) == "3 John 1:14"


def test_normalize_and_chapter_count():
    assert normalize_book("1  corinthians") == "1 Corinthians"
    assert normalize_book("Song of Songs") == "Song of Solomon"
    assert normalize_book("Hezekiah") is None
    assert chapter_count("psalms") == 150
    assert chapter_count("Obadiah") == 1
    assert chapter_count("Hezekiah") == DEFAULT_CHAPTER_COUNT
