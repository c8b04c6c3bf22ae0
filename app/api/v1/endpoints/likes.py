"""Like endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.models.profile import Profile
from app.schemas.base import SuccessResponse
from app.schemas.post import LikeCreate, LikeCreateResponse, LikeResponse
from app.services.like_service import like_post, unlike_post

router = APIRouter(prefix="/likes", tags=["likes"])


@router.post("", response_model=LikeCreateResponse)
async def like_endpoint(
    data: LikeCreate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    like = await like_post(db, current_user.id, data.post_id)
    await db.commit()
    return LikeCreateResponse(like=LikeResponse.model_validate(like))


@router.delete("", response_model=SuccessResponse)
async def unlike_endpoint(
    post_id: UUID = Query(..., alias="postId"),
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await unlike_post(db, current_user.id, post_id)
    await db.commit()
    return SuccessResponse()
