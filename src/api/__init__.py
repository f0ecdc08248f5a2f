"""HTTP API for managing users and reminders."""

from src.api.app import app

__all__ = ["app"]
