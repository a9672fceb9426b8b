"""API layer - REST and WebSocket endpoints."""

from src.api.main import app, create_app

__all__ = [
    "app",
    "create_app",
]
