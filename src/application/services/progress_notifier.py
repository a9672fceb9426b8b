"""Delivery of pipeline events to the owning user's live sessions."""

import asyncio

from src.application.dtos.processing import ProcessingEvent, ProcessingProgress
from src.application.services.record_store import ProcessingRecordStore
from src.commons.infrastructure.realtime.base import RealtimeChannelBase
from src.commons.telemetry import get_logger


class ProgressNotifier:
    """Records progress durably and pushes events to one user.

    Persistence comes first so a client that reconnects can rebuild state
    from the record. Persistence errors propagate because they are run
    bookkeeping failures. Delivery is best effort: it is bounded by a timeout
    and any failure is logged and dropped.
    """

    def __init__(
        self,
        channel: RealtimeChannelBase,
        record_store: ProcessingRecordStore,
        delivery_timeout_seconds: float = 2.0,
    ) -> None:
        self._channel = channel
        self._records = record_store
        self._timeout = delivery_timeout_seconds
        self._logger = get_logger(__name__)

    async def notify(
        self,
        owner_id: str,
        video_id: str,
        event: ProcessingEvent,
        *,
        generation: int | None = None,
    ) -> None:
        """Persist (progress events with a generation) and deliver an event.

        Args:
            owner_id: The only user that receives the event.
            video_id: Video the event belongs to.
            event: Start, progress, complete or error event.
            generation: Run generation to persist progress under. When None the
                event is delivered without touching the record.

        Raises:
            RunSupersededException: If persisting under a stale generation.
        """
        if isinstance(event, ProcessingProgress) and generation is not None:
            await self._records.write(
                video_id,
                generation,
                {
                    "processing_progress": event.progress,
                    "current_stage": event.stage,
                },
            )

        await self._deliver(owner_id, event)

    async def _deliver(self, owner_id: str, event: ProcessingEvent) -> None:
        try:
            sessions = await asyncio.wait_for(
                self._channel.send_to_user(owner_id, event.event_name, event.payload()),
                timeout=self._timeout,
            )
        except Exception as e:
            self._logger.warning(
                "Event delivery failed",
                extra={
                    "owner_id": owner_id,
                    "event_name": event.event_name,
                    "error": repr(e),
                },
            )
            return

        self._logger.debug(
            "Event delivered",
            extra={
                "owner_id": owner_id,
                "event_name": event.event_name,
                "sessions": sessions,
            },
        )
