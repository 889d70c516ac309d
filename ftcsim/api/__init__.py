"""ftcsim API package - FastAPI backend for the match simulator."""

from ftcsim.api.main import app, create_app

__all__ = ["app", "create_app"]
