"""In-process session hub for WebSocket delivery."""

import asyncio
from collections import defaultdict
from collections.abc import AsyncIterator
from typing import Any

from src.commons.infrastructure.blob.base import HealthStatus
from src.commons.infrastructure.realtime.base import (
    RealtimeChannelBase,
    RealtimeMessage,
)
from src.commons.telemetry import get_logger


class SessionHub(RealtimeChannelBase):
    """Fans events out to per-session queues grouped by user.

    Each WebSocket connection owns one bounded queue. When a slow client lets
    its queue fill up, the oldest pending event is dropped so the sender never
    blocks.
    """

    def __init__(self, queue_size: int = 256) -> None:
        self._queue_size = queue_size
        self._sessions: dict[str, set[asyncio.Queue[RealtimeMessage]]] = defaultdict(
            set
        )
        self._logger = get_logger(__name__)

    def session_count(self, user_id: str | None = None) -> int:
        if user_id is not None:
            return len(self._sessions.get(user_id, ()))
        return sum(len(queues) for queues in self._sessions.values())

    async def send_to_user(
        self,
        user_id: str,
        event_name: str,
        payload: dict[str, Any],
    ) -> int:
        message = RealtimeMessage(event=event_name, payload=payload)
        queues = list(self._sessions.get(user_id, ()))
        for queue in queues:
            if queue.full():
                queue.get_nowait()
                self._logger.warning(
                    "Session queue full, dropped oldest event",
                    extra={"user_id": user_id, "event_name": event_name},
                )
            queue.put_nowait(message)
        return len(queues)

    async def subscribe(self, user_id: str) -> AsyncIterator[RealtimeMessage]:
        queue: asyncio.Queue[RealtimeMessage] = asyncio.Queue(self._queue_size)
        self._sessions[user_id].add(queue)
        self._logger.debug("Session joined", extra={"user_id": user_id})
        try:
            while True:
                yield await queue.get()
        finally:
            sessions = self._sessions.get(user_id)
            if sessions is not None:
                sessions.discard(queue)
                if not sessions:
                    del self._sessions[user_id]
            self._logger.debug("Session left", extra={"user_id": user_id})

    async def health_check(self) -> HealthStatus:
        return HealthStatus(
            healthy=True,
            latency_ms=0.0,
            message="Session hub is healthy",
            details={"sessions": str(self.session_count())},
        )
