"""Submit-then-poll driver for the external moderation service."""

import asyncio
from collections.abc import Awaitable, Callable

from src.application.dtos.processing import StageLabel
from src.application.services.sensitivity_classifier import round_half_up
from src.commons.settings.models import ModerationSettings
from src.commons.telemetry import get_logger
from src.domain.exceptions import ModerationJobFailedError, ModerationTimeoutError
from src.domain.models.sensitivity import ModerationFinding
from src.domain.value_objects.storage_location import RemoteStorage
from src.infrastructure.moderation.base import (
    ModerationJobStatus,
    ModerationServiceBase,
)

# (stage label, progress, message)
ProgressReporter = Callable[[str, int, str], Awaitable[None]]

SUBMIT_PROGRESS = 40
SUBMITTED_PROGRESS = 50
POLL_CEILING = 80


def polling_progress(attempt: int, max_attempts: int) -> int:
    """Progress after ``attempt`` polls, climbing from 50 and capped at 80."""
    span = POLL_CEILING - SUBMITTED_PROGRESS
    return min(
        POLL_CEILING,
        round_half_up(SUBMITTED_PROGRESS + span / max_attempts * attempt),
    )


class ModerationClient:
    """Runs one moderation job to completion, reporting progress as it goes.

    Progress stays within [40, 80] and never decreases. Service errors,
    job failure and polling exhaustion all surface as ModerationServiceError
    subclasses for the orchestrator to fall back on.
    """

    def __init__(
        self,
        service: ModerationServiceBase,
        settings: ModerationSettings,
    ) -> None:
        self._service = service
        self._settings = settings
        self._logger = get_logger(__name__)

    async def analyze(
        self,
        storage: RemoteStorage,
        report: ProgressReporter,
    ) -> list[ModerationFinding]:
        """Moderate a stored video.

        Args:
            storage: Bucket and key of the asset.
            report: Awaited with each progress update.

        Returns:
            Findings in service order, possibly empty.

        Raises:
            ModerationServiceError: If submission or polling fails.
            ModerationJobFailedError: If the job itself fails.
            ModerationTimeoutError: If the job is unfinished after the last poll.
        """
        settings = self._settings

        await report(
            StageLabel.MODERATION_START,
            SUBMIT_PROGRESS,
            "Initiating content moderation analysis...",
        )
        job_id = await self._service.submit(storage)
        self._logger.info(
            "Moderation job submitted",
            extra={"job_id": job_id, "uri": storage.uri},
        )

        await report(
            StageLabel.MODERATION_SUBMITTED,
            SUBMITTED_PROGRESS,
            "Content moderation job submitted...",
        )
        await asyncio.sleep(settings.initial_delay_seconds)

        max_attempts = settings.max_polling_attempts
        for attempt in range(1, max_attempts + 1):
            result = await self._service.poll(job_id)
            progress = polling_progress(attempt, max_attempts)
            await report(
                StageLabel.MODERATION_POLLING,
                progress,
                f"Analyzing video content... ({progress}%)",
            )

            if result.status == ModerationJobStatus.SUCCEEDED:
                await report(
                    StageLabel.MODERATION_DONE,
                    POLL_CEILING,
                    "Content moderation completed successfully",
                )
                self._logger.info(
                    "Moderation job succeeded",
                    extra={
                        "job_id": job_id,
                        "attempts": attempt,
                        "findings": len(result.findings),
                    },
                )
                return result.findings

            if result.status == ModerationJobStatus.FAILED:
                raise ModerationJobFailedError(
                    job_id,
                    result.status_message or "unknown error",
                )

            if attempt < max_attempts:
                await asyncio.sleep(settings.polling_interval_seconds)

        raise ModerationTimeoutError(job_id, max_attempts)
