"""Forum post business logic: reply trees, create/update/delete, like lookups."""
import logging
from uuid import UUID

from sqlalchemy import case, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.models.engagement import Like
from app.models.post import Post
from app.models.profile import Profile
from app.models.topic import Topic
from app.schemas.post import PostCreate, PostResponse
from app.services.profile_service import author_summary, get_profiles_by_ids

logger = logging.getLogger(__name__)


async def count_likes(db: AsyncSession, post_ids: list[UUID]) -> dict[UUID, int]:
    if not post_ids:
        return {}
    result = await db.execute(
        select(Like.post_id, func.count(Like.id)).where(Like.post_id.in_(post_ids)).group_by(Like.post_id)
    )
    return {post_id: count for post_id, count in result.all()}


async def get_user_liked_post_ids(
    db: AsyncSession,
    user_id: UUID | None,
    post_ids: list[UUID],
) -> set[UUID]:
    """Return set of post IDs that the user has liked. Anonymous viewers have liked nothing."""
    if user_id is None or not post_ids:
        return set()
    result = await db.execute(
        select(Like.post_id).where(
            Like.user_id == user_id,
            Like.post_id.in_(post_ids),
        )
    )
    return set(row[0] for row in result.all() if row[0])


def post_to_response(
    post: Post,
    author: Profile | None,
    *,
    likes: int = 0,
    is_liked: bool = False,
    replies: list[PostResponse] | None = None,
) -> PostResponse:
    return PostResponse(
        id=post.id,
        topic_id=post.topic_id,
        parent_id=post.parent_id,
        content=post.content,
        created_at=post.created_at,
        likes=likes,
        is_liked=is_liked,
        author=author_summary(post.author_id, author),
        replies=replies or [],
    )


async def build_post_tree(db: AsyncSession, topic_id: UUID, viewer_id: UUID | None) -> list[PostResponse]:
    """Top-level posts oldest-first, each with its replies oldest-first.

    Replies whose parent is not a top-level post of this topic are left out.
    """
    result = await db.execute(
        select(Post)
        .where(Post.topic_id == topic_id, Post.parent_id.is_(None))
        .order_by(Post.created_at)
    )
    posts = list(result.scalars().all())
    post_ids = [p.id for p in posts]

    replies_by_parent: dict[UUID, list[Post]] = {}
    if post_ids:
        result = await db.execute(
            select(Post).where(Post.parent_id.in_(post_ids)).order_by(Post.created_at)
        )
        for reply in result.scalars().all():
            replies_by_parent.setdefault(reply.parent_id, []).append(reply)

    all_posts = posts + [r for rs in replies_by_parent.values() for r in rs]
    all_ids = [p.id for p in all_posts]
    profiles = await get_profiles_by_ids(db, [p.author_id for p in all_posts])
    like_counts = await count_likes(db, all_ids)
    liked_ids = await get_user_liked_post_ids(db, viewer_id, all_ids)

    def _render(post: Post, replies: list[PostResponse] | None = None) -> PostResponse:
        return post_to_response(
            post,
            profiles.get(post.author_id),
            likes=like_counts.get(post.id, 0),
            is_liked=post.id in liked_ids,
            replies=replies,
        )

    return [
        _render(post, [_render(reply) for reply in replies_by_parent.get(post.id, [])])
        for post in posts
    ]


async def get_post_or_404(db: AsyncSession, post_id: UUID) -> Post:
    result = await db.execute(select(Post).where(Post.id == post_id))
    post = result.scalar_one_or_none()
    if not post:
        raise NotFoundError("Post not found")
    return post


async def list_posts(db: AsyncSession, topic_id: UUID, viewer_id: UUID | None) -> list[PostResponse]:
    exists = await db.execute(select(Topic.id).where(Topic.id == topic_id))
    if exists.scalar_one_or_none() is None:
        raise NotFoundError("Topic not found")
    return await build_post_tree(db, topic_id, viewer_id)


async def create_post(db: AsyncSession, author: Profile, data: PostCreate) -> PostResponse:
    result = await db.execute(select(Topic).where(Topic.id == data.topic_id))
    topic = result.scalar_one_or_none()
    if not topic:
        raise NotFoundError("Topic not found")
    if data.parent_id is not None:
        parent = await db.execute(
            select(Post).where(Post.id == data.parent_id, Post.topic_id == data.topic_id)
        )
        parent = parent.scalar_one_or_none()
        if not parent:
            raise NotFoundError("Parent post not found")
        if parent.parent_id is not None:
            raise ValidationError("Replies can only be nested one level deep")

    post = Post(
        topic_id=data.topic_id,
        author_id=author.id,
        content=data.content,
        parent_id=data.parent_id,
        likes_count=0,
    )
    db.add(post)
    if data.parent_id is None:
        await db.execute(
            update(Topic).where(Topic.id == topic.id).values(replies_count=Topic.replies_count + 1)
        )
    await db.flush()
    await db.refresh(post)
    return post_to_response(post, author)


def _ensure_author(post: Post, caller_id: UUID, action: str) -> None:
    if post.author_id != caller_id:
        raise AuthorizationError(f"Unauthorized to {action} this post")


async def update_post(db: AsyncSession, post_id: UUID, caller: Profile, content: str) -> PostResponse:
    post = await get_post_or_404(db, post_id)
    _ensure_author(post, caller.id, "update")
    post.content = content
    await db.flush()
    await db.refresh(post)
    likes = (await count_likes(db, [post.id])).get(post.id, 0)
    liked = await get_user_liked_post_ids(db, caller.id, [post.id])
    return post_to_response(post, caller, likes=likes, is_liked=post.id in liked)


async def delete_post(db: AsyncSession, post_id: UUID, caller: Profile) -> None:
    """Delete a post. A top-level post takes its nested replies (and all their likes) with it."""
    post = await get_post_or_404(db, post_id)
    _ensure_author(post, caller.id, "delete")
    doomed = select(Post.id).where(or_(Post.id == post_id, Post.parent_id == post_id))
    await db.execute(delete(Like).where(Like.post_id.in_(doomed)))
    await db.execute(delete(Post).where(Post.parent_id == post_id))
    if post.parent_id is None:
        await db.execute(
            update(Topic)
            .where(Topic.id == post.topic_id)
            .values(replies_count=case((Topic.replies_count > 0, Topic.replies_count - 1), else_=0))
        )
    await db.delete(post)
    await db.flush()
    logger.info("Post %s deleted by %s", post_id, caller.id)
