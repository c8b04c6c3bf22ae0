"""V1 API router aggregation."""
from fastapi import APIRouter

from app.api.v1.endpoints import auth, bible, groups, likes, posts, profiles, saved, topics

community_router = APIRouter(prefix="/community")
community_router.include_router(topics.router)
community_router.include_router(posts.router)
community_router.include_router(likes.router)
community_router.include_router(groups.router)

api_router = APIRouter(prefix="/v1")
api_router.include_router(auth.router)
api_router.include_router(profiles.router)
api_router.include_router(community_router)
api_router.include_router(bible.router)
api_router.include_router(saved.router)
