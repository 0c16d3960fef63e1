"""HTTP API package."""

from money_tracker.api.app import create_app
from money_tracker.api.routes import router

__all__ = ["create_app", "router"]
