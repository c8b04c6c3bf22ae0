"""Like ledger: one like per (user, post), counter kept in the same transaction."""
import logging
from uuid import UUID

from sqlalchemy import case, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError
from app.models.engagement import Like
from app.models.post import Post
from app.services.post_service import get_post_or_404

logger = logging.getLogger(__name__)

ALREADY_LIKED = "You have already liked this post"


async def like_post(db: AsyncSession, user_id: UUID, post_id: UUID) -> Like:
    """Record a like. A second like by the same user is a conflict, not a no-op."""
    await get_post_or_404(db, post_id)
    existing = await db.execute(select(Like.id).where(Like.user_id == user_id, Like.post_id == post_id))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(ALREADY_LIKED)

    like = Like(user_id=user_id, post_id=post_id)
    try:
        async with db.begin_nested():
            db.add(like)
            await db.flush()
    except IntegrityError:
        # lost a race with a concurrent like from the same user
        raise ConflictError(ALREADY_LIKED)
    await db.execute(update(Post).where(Post.id == post_id).values(likes_count=Post.likes_count + 1))
    await db.flush()
    await db.refresh(like)
    return like


async def unlike_post(db: AsyncSession, user_id: UUID, post_id: UUID) -> bool:
    """Remove the caller's like. Returns False (and changes nothing) when there was none."""
    result = await db.execute(select(Like).where(Like.user_id == user_id, Like.post_id == post_id))
    like = result.scalar_one_or_none()
    if like is None:
        return False
    await db.delete(like)
    await db.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(likes_count=case((Post.likes_count > 0, Post.likes_count - 1), else_=0))
    )
    await db.flush()
    return True
