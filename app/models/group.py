"""Small groups and their role-bearing memberships."""
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid

from app.db.session import Base

ROLE_MEMBER = "member"
ROLE_ADMIN = "admin"
ROLE_OWNER = "owner"
MEMBER_ROLES = (ROLE_MEMBER, ROLE_ADMIN, ROLE_OWNER)
MANAGING_ROLES = (ROLE_ADMIN, ROLE_OWNER)


class Group(Base):
    __tablename__ = "community_groups"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    schedule = Column(Text, nullable=True)
    created_by = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)


class GroupMembership(Base):
    __tablename__ = "community_group_members"
    __table_args__ = (UniqueConstraint("group_id", "user_id", name="uq_community_group_members_group_user"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    group_id = Column(Uuid(as_uuid=True), ForeignKey("community_groups.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default=ROLE_MEMBER)  # member | admin | owner
    joined_at = Column(DateTime, default=datetime.utcnow)
