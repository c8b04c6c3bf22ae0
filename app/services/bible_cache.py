"""In-process cache for chapter content.

Unbounded and kept for the life of the process. That is only acceptable because
scripture text for a given translation never changes; do not reuse this for
anything mutable.
"""
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class ChapterCache(Generic[T]):
    def __init__(self) -> None:
        self._entries: dict[str, T] = {}

    @staticmethod
    def key(book: str, chapter: int) -> str:
        return f"{book}-{chapter}"

    def get(self, book: str, chapter: int) -> T | None:
        return self._entries.get(self.key(book, chapter))

    def put(self, book: str, chapter: int, value: T) -> None:
        self._entries[self.key(book, chapter)] = value

    async def get_or_load(self, book: str, chapter: int, loader: Callable[[], Awaitable[T]]) -> T:
        """Return the cached chapter, loading and storing it on a miss. Failed loads are not cached."""
        key = self.key(book, chapter)
        if key in self._entries:
            return self._entries[key]
        value = await loader()
        self._entries[key] = value
        return value

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
