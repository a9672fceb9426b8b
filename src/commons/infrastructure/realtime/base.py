"""Abstract base class for per-user real-time delivery."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

from src.commons.infrastructure.blob.base import HealthStatus


@dataclass(frozen=True)
class RealtimeMessage:
    """An event as delivered to a connected session."""

    event: str
    payload: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {"event": self.event, "data": self.payload}


class RealtimeChannelBase(ABC):
    """Pushes named events to every live session of one user.

    Implementations:
    - In-process session hub (single API process)
    - Redis pub/sub (several API processes behind a load balancer)
    """

    @abstractmethod
    async def send_to_user(
        self,
        user_id: str,
        event_name: str,
        payload: dict[str, Any],
    ) -> int:
        """Deliver an event to the user's sessions.

        Delivery is fire-and-forget: a user with no open session is not an
        error.

        Returns:
            Number of sessions (or subscribers) that received the event.
        """

    @abstractmethod
    def subscribe(self, user_id: str) -> AsyncIterator[RealtimeMessage]:
        """Yield events addressed to ``user_id`` until the consumer stops."""
        ...

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check channel health."""

    async def close(self) -> None:  # noqa: B027
        """Release resources. No-op by default."""
