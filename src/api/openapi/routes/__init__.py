"""API route handlers."""

from src.api.openapi.routes import health, processing, realtime

__all__ = [
    "health",
    "processing",
    "realtime",
]
