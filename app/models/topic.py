"""Forum topic model."""
import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB

from app.db.session import Base

TOPIC_CATEGORIES = (
    "Bible Study",
    "Prayer Requests",
    "Resources",
    "Testimonies",
    "Theology",
    "Discipleship",
    "Evangelism",
    "Worship",
    "Family",
)
ALL_CATEGORIES = "All Categories"


class Topic(Base):
    __tablename__ = "community_topics"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    author_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    tags = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=list)
    views_count = Column(Integer, nullable=False, default=0)
    replies_count = Column(Integer, nullable=False, default=0)  # top-level posts only
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
