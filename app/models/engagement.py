"""Engagement models: post likes."""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, Uuid

from app.db.session import Base


class Like(Base):
    __tablename__ = "community_likes"
    __table_args__ = (UniqueConstraint("user_id", "post_id", name="uq_community_likes_user_post"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    post_id = Column(Uuid(as_uuid=True), ForeignKey("community_posts.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
