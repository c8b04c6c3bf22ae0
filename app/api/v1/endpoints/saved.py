"""Saved verse endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.models.profile import Profile
from app.schemas.base import SuccessResponse
from app.schemas.bible import SavedVerseCreate, SavedVerseResponse
from app.services.saved_service import delete_saved_verse, list_saved_verses, save_verse

router = APIRouter(prefix="/saved/verses", tags=["saved"])


@router.get("", response_model=list[SavedVerseResponse])
async def list_saved(
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return [SavedVerseResponse.model_validate(v) for v in await list_saved_verses(db, current_user.id)]


@router.post("", response_model=SavedVerseResponse)
async def save(
    data: SavedVerseCreate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    saved = await save_verse(db, current_user.id, data)
    await db.commit()
    return SavedVerseResponse.model_validate(saved)


@router.delete("/{saved_id}", response_model=SuccessResponse)
async def delete_saved(
    saved_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_saved_verse(db, current_user.id, saved_id)
    await db.commit()
    return SuccessResponse()
