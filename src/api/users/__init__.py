"""User profile endpoints."""

from src.api.users.endpoints import router

__all__ = ["router"]
