"""Forum topic endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_current_user_optional, get_db
from app.models.profile import Profile
from app.schemas.base import SuccessResponse
from app.schemas.topic import (
    TopicCreate,
    TopicDetailResponse,
    TopicListResponse,
    TopicMutationResponse,
    TopicUpdate,
)
from app.services.topic_service import (
    create_topic,
    delete_topic,
    get_topic_detail,
    list_topics,
    record_topic_view,
    update_topic,
)

router = APIRouter(prefix="/topics", tags=["topics"])


@router.get("", response_model=TopicListResponse)
async def list_topics_endpoint(
    category: str | None = None,
    search: str | None = None,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    topics, total = await list_topics(db, category=category, search=search, limit=limit, offset=offset)
    return TopicListResponse(topics=topics, total_count=total)


@router.post("", response_model=TopicMutationResponse)
async def create_topic_endpoint(
    data: TopicCreate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    topic = await create_topic(db, current_user, data)
    await db.commit()
    return TopicMutationResponse(topic=topic)


@router.get("/{topic_id}", response_model=TopicDetailResponse)
async def get_topic_endpoint(
    topic_id: UUID,
    current_user: Profile | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    detail = await get_topic_detail(db, topic_id, current_user.id if current_user else None)
    await db.commit()
    return detail


@router.post("/{topic_id}/view", response_model=SuccessResponse)
async def view_topic_endpoint(topic_id: UUID, db: AsyncSession = Depends(get_db)):
    await record_topic_view(db, topic_id)
    await db.commit()
    return SuccessResponse()


@router.put("/{topic_id}", response_model=TopicMutationResponse)
async def update_topic_endpoint(
    topic_id: UUID,
    data: TopicUpdate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    topic = await update_topic(db, topic_id, current_user, data)
    await db.commit()
    return TopicMutationResponse(topic=topic)


@router.delete("/{topic_id}", response_model=SuccessResponse)
async def delete_topic_endpoint(
    topic_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_topic(db, topic_id, current_user)
    await db.commit()
    return SuccessResponse()
