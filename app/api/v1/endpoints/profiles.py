"""Profile endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.models.profile import Profile
from app.schemas.user import AuthorSummary, ProfileResponse, ProfileUpdate
from app.services.profile_service import author_summary, get_profile, profile_to_response, update_profile

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileResponse)
async def get_me(current_user: Profile = Depends(get_current_user)):
    return profile_to_response(current_user, include_email=True)


@router.put("/me", response_model=ProfileResponse)
async def update_me(
    data: ProfileUpdate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await update_profile(db, current_user, data)
    await db.commit()
    return profile_to_response(profile, include_email=True)


@router.get("/{user_id}", response_model=AuthorSummary)
async def get_public_profile(user_id: UUID, db: AsyncSession = Depends(get_db)):
    profile = await get_profile(db, user_id)
    return author_summary(profile.id, profile)
