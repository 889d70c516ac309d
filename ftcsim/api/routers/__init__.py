"""API routers for match sessions."""

from ftcsim.api.routers.match import router as match_router
from ftcsim.api.routers.match_websocket import router as match_websocket_router

__all__ = [
    "match_router",
    "match_websocket_router",
]
