"""Forum topic business logic: listing, detail, create/update/delete."""
import logging
from uuid import UUID

from sqlalchemy import delete, desc, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.models.engagement import Like
from app.models.post import Post
from app.models.profile import Profile
from app.models.topic import ALL_CATEGORIES, TOPIC_CATEGORIES, Topic
from app.schemas.topic import TopicCreate, TopicDetailResponse, TopicResponse, TopicUpdate
from app.services.post_service import build_post_tree
from app.services.profile_service import author_summary, get_profiles_by_ids

logger = logging.getLogger(__name__)


def normalize_tags(tags: str | list[str] | None) -> list[str]:
    """Accept "a, b" or ["a", "b"]; return trimmed non-empty tags, first occurrence kept."""
    if not tags:
        return []
    raw = tags.split(",") if isinstance(tags, str) else tags
    result: list[str] = []
    for tag in raw:
        tag = str(tag).strip()
        if tag and tag not in result:
            result.append(tag)
    return result


def validate_category(category: str) -> str:
    if category not in TOPIC_CATEGORIES:
        raise ValidationError("Invalid category", details=f"Expected one of: {', '.join(TOPIC_CATEGORIES)}")
    return category


def topic_to_response(topic: Topic, author: Profile | None, replies: int) -> TopicResponse:
    return TopicResponse(
        id=topic.id,
        title=topic.title,
        description=topic.description,
        category=topic.category,
        tags=list(topic.tags or []),
        created_at=topic.created_at,
        replies=replies,
        views=topic.views_count or 0,
        author=author_summary(topic.author_id, author),
    )


async def count_top_level_posts(db: AsyncSession, topic_ids: list[UUID]) -> dict[UUID, int]:
    """Live reply counts; the stored replies_count is never trusted on read."""
    if not topic_ids:
        return {}
    result = await db.execute(
        select(Post.topic_id, func.count(Post.id))
        .where(Post.topic_id.in_(topic_ids), Post.parent_id.is_(None))
        .group_by(Post.topic_id)
    )
    return {topic_id: count for topic_id, count in result.all()}


async def list_topics(
    db: AsyncSession,
    *,
    category: str | None = None,
    search: str | None = None,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[TopicResponse], int]:
    filters = []
    if category and category != ALL_CATEGORIES:
        filters.append(Topic.category == category)
    if search:
        pattern = f"%{search}%"
        filters.append(or_(Topic.title.ilike(pattern), Topic.description.ilike(pattern)))

    total = (await db.execute(select(func.count(Topic.id)).where(*filters))).scalar() or 0
    result = await db.execute(
        select(Topic).where(*filters).order_by(desc(Topic.created_at)).offset(offset).limit(limit)
    )
    topics = list(result.scalars().all())

    profiles = await get_profiles_by_ids(db, [t.author_id for t in topics])
    reply_counts = await count_top_level_posts(db, [t.id for t in topics])
    return [
        topic_to_response(t, profiles.get(t.author_id), reply_counts.get(t.id, 0)) for t in topics
    ], total


async def get_topic_or_404(db: AsyncSession, topic_id: UUID) -> Topic:
    result = await db.execute(select(Topic).where(Topic.id == topic_id))
    topic = result.scalar_one_or_none()
    if not topic:
        raise NotFoundError("Topic not found")
    return topic


async def increment_topic_views(db: AsyncSession, topic_id: UUID) -> bool:
    """Bump the view counter inside a savepoint. Failures are logged, never raised."""
    try:
        async with db.begin_nested():
            await db.execute(
                update(Topic).where(Topic.id == topic_id).values(views_count=Topic.views_count + 1)
            )
    except SQLAlchemyError:
        logger.warning("Error incrementing view count for topic %s", topic_id, exc_info=True)
        return False
    return True


async def record_topic_view(db: AsyncSession, topic_id: UUID) -> None:
    await get_topic_or_404(db, topic_id)
    await increment_topic_views(db, topic_id)


async def get_topic_detail(db: AsyncSession, topic_id: UUID, viewer_id: UUID | None) -> TopicDetailResponse:
    await increment_topic_views(db, topic_id)
    topic = await get_topic_or_404(db, topic_id)
    profiles = await get_profiles_by_ids(db, [topic.author_id])
    posts = await build_post_tree(db, topic.id, viewer_id)
    return TopicDetailResponse(
        topic=topic_to_response(topic, profiles.get(topic.author_id), len(posts)),
        posts=posts,
    )


async def create_topic(db: AsyncSession, author: Profile, data: TopicCreate) -> TopicResponse:
    topic = Topic(
        author_id=author.id,
        title=data.title,
        description=data.description,
        category=validate_category(data.category),
        tags=normalize_tags(data.tags),
        views_count=0,
        replies_count=0,
    )
    db.add(topic)
    await db.flush()
    await db.refresh(topic)
    logger.info("Topic %s created by %s", topic.id, author.id)
    return topic_to_response(topic, author, 0)


def _ensure_author(topic: Topic, caller_id: UUID, action: str) -> None:
    if topic.author_id != caller_id:
        raise AuthorizationError(f"Unauthorized to {action} this topic")


async def update_topic(db: AsyncSession, topic_id: UUID, caller: Profile, data: TopicUpdate) -> TopicResponse:
    topic = await get_topic_or_404(db, topic_id)
    _ensure_author(topic, caller.id, "update")
    if data.title is not None:
        topic.title = data.title
    if data.description is not None:
        topic.description = data.description
    if data.category is not None:
        topic.category = validate_category(data.category)
    if data.tags is not None:
        topic.tags = normalize_tags(data.tags)
    await db.flush()
    await db.refresh(topic)
    replies = (await count_top_level_posts(db, [topic.id])).get(topic.id, 0)
    return topic_to_response(topic, caller, replies)


async def delete_topic(db: AsyncSession, topic_id: UUID, caller: Profile) -> None:
    """Delete the topic with its posts and their likes in one transaction."""
    topic = await get_topic_or_404(db, topic_id)
    _ensure_author(topic, caller.id, "delete")
    post_ids = select(Post.id).where(Post.topic_id == topic_id)
    await db.execute(delete(Like).where(Like.post_id.in_(post_ids)))
    # replies first so the self-referencing FK never points at a removed row
    await db.execute(delete(Post).where(Post.topic_id == topic_id, Post.parent_id.is_not(None)))
    await db.execute(delete(Post).where(Post.topic_id == topic_id))
    await db.delete(topic)
    await db.flush()
    logger.info("Topic %s deleted by %s", topic_id, caller.id)
