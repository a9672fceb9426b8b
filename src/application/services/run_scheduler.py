"""Background scheduling of pipeline runs."""

import asyncio

from src.application.services.pipeline import PipelineOrchestrator
from src.application.services.record_store import ProcessingRecordStore
from src.commons.telemetry import get_logger
from src.domain.exceptions import PipelineRunError, VideoNotFoundException


class PipelineRunScheduler:
    """Starts pipeline runs as background tasks and keeps them alive.

    Callers get control back as soon as the run is scheduled. Results reach
    clients through the real-time channel or by reading the record.
    """

    def __init__(
        self,
        orchestrator: PipelineOrchestrator,
        record_store: ProcessingRecordStore,
    ) -> None:
        self._orchestrator = orchestrator
        self._records = record_store
        self._tasks: set[asyncio.Task[None]] = set()
        self._logger = get_logger(__name__)

    @property
    def active_runs(self) -> int:
        return len(self._tasks)

    async def start_run(self, video_id: str, owner_id: str | None = None) -> str:
        """Schedule a run and return immediately.

        A run already in flight for the same video is superseded by the new one.

        Returns:
            The video id.

        Raises:
            VideoNotFoundException: If the record does not exist.
        """
        record = await self._records.load(video_id)
        owner = owner_id or record.owner_id

        task = asyncio.create_task(
            self._execute(video_id, owner),
            name=f"sensitivity-run-{video_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        self._logger.info(
            "Pipeline run scheduled",
            extra={"video_id": video_id, "owner_id": owner},
        )
        return video_id

    async def reprocess(self, video_id: str, owner_id: str | None = None) -> str:
        """Reset a video to ``pending`` and schedule a fresh run.

        Raises:
            VideoNotFoundException: If the record does not exist.
        """
        record = await self._records.reset_for_reprocess(video_id)
        self._logger.info(
            "Video reset for reprocessing",
            extra={"video_id": video_id, "run_generation": record.run_generation},
        )
        return await self.start_run(video_id, owner_id or record.owner_id)

    async def shutdown(self) -> None:
        """Cancel outstanding runs and wait for them to unwind."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            self._logger.info("Cancelled pipeline runs", extra={"count": len(tasks)})

    async def _execute(self, video_id: str, owner_id: str) -> None:
        try:
            await self._orchestrator.run(video_id, owner_id)
        except PipelineRunError as e:
            self._logger.warning(
                "Pipeline run failed",
                extra={"video_id": video_id, "stage": e.stage, "reason": e.reason},
            )
        except VideoNotFoundException:
            self._logger.warning(
                "Video disappeared before its run started",
                extra={"video_id": video_id},
            )
        except Exception:
            self._logger.exception(
                "Unexpected error in pipeline run",
                extra={"video_id": video_id},
            )
