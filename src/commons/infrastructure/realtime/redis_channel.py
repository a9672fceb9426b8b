"""Redis pub/sub delivery for multi-process deployments."""

import contextlib
import json
import time
from collections.abc import AsyncIterator
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from src.commons.infrastructure.blob.base import HealthStatus
from src.commons.infrastructure.realtime.base import (
    RealtimeChannelBase,
    RealtimeMessage,
)
from src.commons.telemetry import get_logger


class RedisPubSubChannel(RealtimeChannelBase):
    """Publishes each user's events on ``{prefix}:user:{user_id}``.

    Any API process holding a WebSocket for that user subscribes to the same
    channel and relays what it receives.
    """

    def __init__(
        self,
        url: str,
        *,
        channel_prefix: str = "sentinel",
        poll_timeout: float = 1.0,
        client: Redis | None = None,
    ) -> None:
        self._client: Redis = client or Redis.from_url(url, decode_responses=True)
        self._prefix = channel_prefix
        self._poll_timeout = poll_timeout
        self._logger = get_logger(__name__)

    def channel_for(self, user_id: str) -> str:
        return f"{self._prefix}:user:{user_id}"

    async def send_to_user(
        self,
        user_id: str,
        event_name: str,
        payload: dict[str, Any],
    ) -> int:
        message = RealtimeMessage(event=event_name, payload=payload)
        receivers = await self._client.publish(
            self.channel_for(user_id),
            json.dumps(message.as_dict(), default=str),
        )
        return int(receivers)

    async def subscribe(self, user_id: str) -> AsyncIterator[RealtimeMessage]:
        pubsub = self._client.pubsub()
        channel = self.channel_for(user_id)
        await pubsub.subscribe(channel)
        try:
            while True:
                message = await pubsub.get_message(
                    ignore_subscribe_messages=True,
                    timeout=self._poll_timeout,
                )
                if message is None or message.get("type") != "message":
                    continue
                try:
                    body = json.loads(message["data"])
                except (TypeError, json.JSONDecodeError):
                    self._logger.warning(
                        "Ignoring malformed pub/sub message",
                        extra={"channel": channel},
                    )
                    continue
                yield RealtimeMessage(
                    event=body.get("event", ""),
                    payload=body.get("data") or {},
                )
        finally:
            with contextlib.suppress(RedisError):
                await pubsub.unsubscribe(channel)
            with contextlib.suppress(RedisError):
                await pubsub.aclose()

    async def health_check(self) -> HealthStatus:
        start = time.perf_counter()
        try:
            await self._client.ping()
            return HealthStatus(
                healthy=True,
                latency_ms=(time.perf_counter() - start) * 1000,
                message="Redis pub/sub is healthy",
            )
        except RedisError as e:
            return HealthStatus(
                healthy=False,
                latency_ms=(time.perf_counter() - start) * 1000,
                message=f"Redis pub/sub health check failed: {e}",
                details={"error": str(e)},
            )

    async def close(self) -> None:
        await self._client.aclose()
