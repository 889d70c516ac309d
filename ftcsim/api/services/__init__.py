"""API services for live match session management."""

from ftcsim.api.services.session_manager import (
    MatchSession,
    MatchSessionManager,
    get_session_manager,
)

__all__ = ["MatchSession", "MatchSessionManager", "get_session_manager"]
