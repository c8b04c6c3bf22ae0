"""Saved verses for a user's profile."""
from uuid import UUID

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.models.saved import SavedVerse
from app.schemas.bible import SavedVerseCreate
from app.services.bible_reference import parse_reference


async def list_saved_verses(db: AsyncSession, user_id: UUID) -> list[SavedVerse]:
    result = await db.execute(
        select(SavedVerse).where(SavedVerse.user_id == user_id).order_by(desc(SavedVerse.created_at))
    )
    return list(result.scalars().all())


async def save_verse(db: AsyncSession, user_id: UUID, data: SavedVerseCreate) -> SavedVerse:
    """Store a verse under its canonical reference ("psalm 23" -> "Psalms 23:1")."""
    reference = str(parse_reference(data.reference))
    existing = await db.execute(
        select(SavedVerse.id).where(SavedVerse.user_id == user_id, SavedVerse.reference == reference)
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("Verse already saved")
    saved = SavedVerse(user_id=user_id, reference=reference, text=data.text)
    try:
        async with db.begin_nested():
            db.add(saved)
            await db.flush()
    except IntegrityError:
        raise ConflictError("Verse already saved")
    await db.refresh(saved)
    return saved


async def delete_saved_verse(db: AsyncSession, user_id: UUID, saved_id: UUID) -> None:
    result = await db.execute(
        select(SavedVerse).where(SavedVerse.id == saved_id, SavedVerse.user_id == user_id)
    )
    saved = result.scalar_one_or_none()
    if saved is None:
        raise NotFoundError("Saved verse not found")
    await db.delete(saved)
    await db.flush()
