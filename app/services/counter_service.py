"""Drift checks for the denormalized counters (topic replies, post likes).

Read paths never trust these columns, but they are kept for reporting and
can drift if a write ever bypasses the services.
"""
import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.engagement import Like
from app.models.post import Post
from app.models.topic import Topic

logger = logging.getLogger(__name__)


@dataclass
class CounterDrift:
    table: str
    row_id: UUID
    stored: int
    actual: int


async def find_counter_drift(db: AsyncSession) -> list[CounterDrift]:
    drift: list[CounterDrift] = []

    top_level = (
        select(Post.topic_id, func.count(Post.id).label("n"))
        .where(Post.parent_id.is_(None))
        .group_by(Post.topic_id)
        .subquery()
    )
    result = await db.execute(
        select(Topic.id, Topic.replies_count, func.coalesce(top_level.c.n, 0))
        .outerjoin(top_level, top_level.c.topic_id == Topic.id)
    )
    for topic_id, stored, actual in result.all():
        if (stored or 0) != actual:
            drift.append(CounterDrift("community_topics", topic_id, stored or 0, actual))

    like_counts = (
        select(Like.post_id, func.count(Like.id).label("n")).group_by(Like.post_id).subquery()
    )
    result = await db.execute(
        select(Post.id, Post.likes_count, func.coalesce(like_counts.c.n, 0))
        .outerjoin(like_counts, like_counts.c.post_id == Post.id)
    )
    for post_id, stored, actual in result.all():
        if (stored or 0) != actual:
            drift.append(CounterDrift("community_posts", post_id, stored or 0, actual))
    return drift


async def repair_counters(db: AsyncSession) -> list[CounterDrift]:
    """Overwrite drifted counters with live counts. Returns what was fixed."""
    drift = await find_counter_drift(db)
    for item in drift:
        if item.table == "community_topics":
            row = await db.get(Topic, item.row_id)
            row.replies_count = item.actual
        else:
            row = await db.get(Post, item.row_id)
            row.likes_count = item.actual
        logger.info("Repaired %s %s: %s -> %s", item.table, item.row_id, item.stored, item.actual)
    await db.flush()
    return drift
