"""Verses a user has saved from reading or search."""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid

from app.db.session import Base


class SavedVerse(Base):
    __tablename__ = "saved_verses"
    __table_args__ = (UniqueConstraint("user_id", "reference", name="uq_saved_verses_user_reference"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    reference = Column(String(100), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
