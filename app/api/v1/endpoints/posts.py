"""Forum post endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_current_user_optional, get_db
from app.models.profile import Profile
from app.schemas.base import SuccessResponse
from app.schemas.post import PostCreate, PostListResponse, PostMutationResponse, PostUpdate
from app.services.post_service import create_post, delete_post, list_posts, update_post

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=PostListResponse)
async def list_posts_endpoint(
    topic_id: UUID = Query(..., alias="topicId"),
    current_user: Profile | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    posts = await list_posts(db, topic_id, current_user.id if current_user else None)
    return PostListResponse(posts=posts)


@router.post("", response_model=PostMutationResponse)
async def create_post_endpoint(
    data: PostCreate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    post = await create_post(db, current_user, data)
    await db.commit()
    return PostMutationResponse(post=post)


@router.put("/{post_id}", response_model=PostMutationResponse)
async def update_post_endpoint(
    post_id: UUID,
    data: PostUpdate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    post = await update_post(db, post_id, current_user, data.content)
    await db.commit()
    return PostMutationResponse(post=post)


@router.delete("/{post_id}", response_model=SuccessResponse)
async def delete_post_endpoint(
    post_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_post(db, post_id, current_user)
    await db.commit()
    return SuccessResponse()
