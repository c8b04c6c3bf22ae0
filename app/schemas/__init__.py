from app.schemas.user import (
    AuthorSummary,
    ProfileResponse,
    ProfileUpdate,
    Token,
    LoginRequest,
    RegisterRequest,
)
from app.schemas.post import PostCreate, PostUpdate, PostResponse
from app.schemas.topic import TopicCreate, TopicUpdate, TopicResponse
from app.schemas.group import GroupCreate, GroupResponse
