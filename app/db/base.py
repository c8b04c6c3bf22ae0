"""SQLAlchemy declarative base and model imports for Alembic."""
from app.db.session import Base  # noqa: F401
from app.models.profile import Profile  # noqa: F401
from app.models.topic import Topic  # noqa: F401
from app.models.post import Post  # noqa: F401
from app.models.engagement import Like  # noqa: F401
from app.models.group import Group, GroupMembership  # noqa: F401
from app.models.saved import SavedVerse  # noqa: F401

__all__ = ["Base", "Profile", "Topic", "Post", "Like", "Group", "GroupMembership", "SavedVerse"]
