"""Real-time delivery channels."""

from src.commons.infrastructure.realtime.base import (
    RealtimeChannelBase,
    RealtimeMessage,
)
from src.commons.infrastructure.realtime.hub import SessionHub
from src.commons.infrastructure.realtime.redis_channel import RedisPubSubChannel

__all__ = [
    # Base classes
    "RealtimeChannelBase",
    "RealtimeMessage",
    # Implementations
    "SessionHub",
    "RedisPubSubChannel",
]
