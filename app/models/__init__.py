from app.models.profile import Profile
from app.models.topic import Topic
from app.models.post import Post
from app.models.engagement import Like
from app.models.group import Group, GroupMembership
from app.models.saved import SavedVerse

__all__ = ["Profile", "Topic", "Post", "Like", "Group", "GroupMembership", "SavedVerse"]
