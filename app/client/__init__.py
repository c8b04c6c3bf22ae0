from app.client.api import ApiError, CommunityClient
from app.client.session import SessionManager
from app.client.view_state import Affordance, AffordanceState, CommunityViewState

__all__ = [
    "ApiError",
    "CommunityClient",
    "SessionManager",
    "Affordance",
    "AffordanceState",
    "CommunityViewState",
]
