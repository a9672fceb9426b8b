"""Sensitivity pipeline orchestration."""

import asyncio
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import cast

from src.application.dtos.processing import (
    PipelineStage,
    ProcessingCompleted,
    ProcessingFailed,
    ProcessingProgress,
    ProcessingStarted,
    StageLabel,
)
from src.application.services.cache_invalidation import CacheInvalidationCoordinator
from src.application.services.metadata_probe import MetadataProbe
from src.application.services.moderation_client import ModerationClient
from src.application.services.progress_notifier import ProgressNotifier
from src.application.services.record_store import ProcessingRecordStore
from src.application.services.sensitivity_classifier import (
    SensitivityClassifier,
    round_half_up,
)
from src.commons.settings.models import PipelineSettings
from src.commons.telemetry import LogContext, get_logger
from src.domain.exceptions import PipelineRunError, RunSupersededException
from src.domain.models.sensitivity import ModerationFinding, SensitivityResult
from src.domain.models.video import FAILED_STAGE_LABEL, ProcessingStatus, VideoRecord
from src.domain.value_objects.storage_location import RemoteStorage

VALIDATION_END = 20
METADATA_START = 25
METADATA_END = 40
MODERATION_END = 80
REPORTING_END = 95
COMPLETE = 100


@dataclass
class _Run:
    """Mutable state of one pipeline run."""

    record: VideoRecord
    owner_id: str
    generation: int
    progress: int = 0
    phase: PipelineStage = PipelineStage.VALIDATION

    @property
    def video_id(self) -> str:
        return self.record.id


class PipelineOrchestrator:
    """Drives one video through validation, metadata, moderation, reporting
    and finalization.

    Every record mutation goes through the record store under the run's
    generation. When a newer run claims the same video, the older run's next
    write raises RunSupersededException and the older run stops without
    writing or notifying again.

    Pipeline stages:
    1. Validation (0-20%)
    2. Metadata probe (20-40%)
    3. Content moderation, simulated for local assets (40-80%)
    4. Report generation (80-95%)
    5. Classification and finalization (95-100%)
    """

    def __init__(
        self,
        record_store: ProcessingRecordStore,
        notifier: ProgressNotifier,
        cache_invalidation: CacheInvalidationCoordinator,
        metadata_probe: MetadataProbe,
        classifier: SensitivityClassifier,
        settings: PipelineSettings,
        moderation_client: ModerationClient | None = None,
    ) -> None:
        self._records = record_store
        self._notifier = notifier
        self._cache = cache_invalidation
        self._probe = metadata_probe
        self._classifier = classifier
        self._settings = settings
        self._moderation = moderation_client
        self._logger = get_logger(__name__)

    async def run(
        self,
        video_id: str,
        owner_id: str | None = None,
    ) -> SensitivityResult | None:
        """Analyze a video and persist its sensitivity result.

        Args:
            video_id: Record to process.
            owner_id: User to notify. Defaults to the record's owner.

        Returns:
            The verdict, or None if a newer run superseded this one.

        Raises:
            VideoNotFoundException: If the record does not exist. No event is
                emitted in that case.
            PipelineRunError: If the run failed and was marked failed.
        """
        try:
            record, generation = await self._records.claim_run(video_id)
        except RunSupersededException:
            self._logger.warning(
                "Could not claim run, record kept changing",
                extra={"video_id": video_id},
            )
            return None

        run = _Run(
            record=record,
            owner_id=owner_id or record.owner_id,
            generation=generation,
        )

        with LogContext(video_id=video_id, run_generation=generation):
            self._logger.info(
                "Starting sensitivity analysis",
                extra={"title": record.title, "storage": record.storage.uri},
            )
            started = time.perf_counter()
            try:
                result = await self._execute(run)
            except RunSupersededException:
                self._logger.info(
                    "Run superseded by a newer run, stopping",
                    extra={"stage": run.phase.value, "progress": run.progress},
                )
                return None
            except Exception as e:
                await self._fail(run, e)
                return None

            self._logger.info(
                "Sensitivity analysis complete",
                extra={
                    "status": result.status.value,
                    "confidence": result.confidence,
                    "method": result.analysis_method.value,
                    "duration_ms": round((time.perf_counter() - started) * 1000),
                },
            )
            return result

    async def _execute(self, run: _Run) -> SensitivityResult:
        await self._notifier.notify(
            run.owner_id,
            run.video_id,
            ProcessingStarted(video_id=run.video_id, title=run.record.title),
        )

        await self._validate(run)
        await self._extract_metadata(run)
        findings = await self._moderate(run)
        await self._report(run)
        return await self._finalize(run, findings)

    async def _validate(self, run: _Run) -> None:
        run.phase = PipelineStage.VALIDATION
        settings = self._settings
        await self._ramp(
            run,
            StageLabel.VALIDATION,
            start=0,
            end=VALIDATION_END,
            steps=settings.validation_steps,
            duration=settings.validation_duration_seconds,
        )

    async def _extract_metadata(self, run: _Run) -> None:
        run.phase = PipelineStage.METADATA
        storage = run.record.storage

        await self._advance(
            run,
            StageLabel.METADATA,
            METADATA_START,
            "Reading video information...",
        )
        if storage.supports_remote_analysis():
            await self._advance(
                run,
                StageLabel.METADATA_DOWNLOAD,
                METADATA_START,
                "Downloading from cloud storage...",
            )

        probe = await self._probe.probe(storage)
        await asyncio.sleep(self._settings.metadata_step_delay_seconds)

        # Values already on the record are never replaced by null
        metadata: dict[str, object] = {"metadata_estimated": probe.estimated}
        if probe.duration_seconds is not None:
            metadata["duration_seconds"] = probe.duration_seconds
        if probe.resolution is not None:
            metadata["resolution"] = probe.resolution
        await self._records.write(
            run.video_id,
            run.generation,
            {
                "processing_progress": METADATA_END,
                "current_stage": StageLabel.METADATA,
                **metadata,
            },
        )
        run.record = run.record.model_copy(update=metadata)
        run.progress = METADATA_END
        await self._notifier.notify(
            run.owner_id,
            run.video_id,
            ProcessingProgress.at(
                run.video_id,
                run.phase,
                StageLabel.METADATA,
                METADATA_END,
                "Metadata extracted",
            ),
        )

    async def _moderate(self, run: _Run) -> list[ModerationFinding]:
        run.phase = PipelineStage.MODERATION
        settings = self._settings
        storage = run.record.storage

        if self._moderation is None or not storage.supports_remote_analysis():
            await self._ramp(
                run,
                StageLabel.SIMULATED_ANALYSIS,
                start=METADATA_END,
                end=MODERATION_END,
                steps=settings.simulated_analysis_steps,
                duration=settings.simulated_analysis_duration_seconds,
            )
            return []

        async def report(stage: str, progress: int, message: str) -> None:
            await self._advance(run, stage, progress, message)

        try:
            return await self._moderation.analyze(cast(RemoteStorage, storage), report)
        except RunSupersededException:
            raise
        except Exception as e:
            self._logger.warning(
                "Content moderation failed, falling back to frame analysis",
                extra={"error": str(e), "error_type": type(e).__name__},
            )

        await self._ramp(
            run,
            StageLabel.MODERATION_FALLBACK,
            start=run.progress,
            end=MODERATION_END,
            steps=settings.fallback_steps,
            duration=settings.fallback_duration_seconds,
        )
        return []

    async def _report(self, run: _Run) -> None:
        run.phase = PipelineStage.REPORTING
        settings = self._settings
        await self._ramp(
            run,
            StageLabel.REPORTING,
            start=MODERATION_END,
            end=REPORTING_END,
            steps=settings.reporting_steps,
            duration=settings.reporting_duration_seconds,
        )

    async def _finalize(
        self,
        run: _Run,
        findings: list[ModerationFinding],
    ) -> SensitivityResult:
        run.phase = PipelineStage.FINALIZATION
        await self._advance(run, StageLabel.FINALIZATION, REPORTING_END)

        record = run.record
        result = self._classifier.classify(
            record.original_name,
            record.title,
            record.size_bytes,
            findings,
        )

        await self._records.write(
            run.video_id,
            run.generation,
            {
                "processing_status": ProcessingStatus.COMPLETED,
                "processing_progress": COMPLETE,
                "current_stage": None,
                "sensitivity_result": result,
                "error_message": None,
                "processed_at": datetime.now(UTC),
            },
        )
        await self._cache.invalidate_owner_views(run.owner_id)
        run.progress = COMPLETE

        await self._notifier.notify(
            run.owner_id,
            run.video_id,
            ProcessingProgress.at(
                run.video_id,
                run.phase,
                StageLabel.COMPLETE,
                COMPLETE,
                "Processing complete",
            ),
        )
        await self._notifier.notify(
            run.owner_id,
            run.video_id,
            ProcessingCompleted.from_result(
                run.video_id,
                result,
                duration=record.duration_seconds,
                resolution=record.resolution,
            ),
        )
        return result

    async def _fail(self, run: _Run, error: Exception) -> None:
        reason = str(error) or type(error).__name__
        self._logger.error(
            "Sensitivity analysis failed",
            exc_info=error,
            extra={"stage": run.phase.value, "progress": run.progress},
        )

        try:
            await self._records.write(
                run.video_id,
                run.generation,
                {
                    "processing_status": ProcessingStatus.FAILED,
                    "current_stage": FAILED_STAGE_LABEL,
                    "error_message": reason,
                },
            )
        except RunSupersededException:
            return
        except Exception:
            self._logger.exception("Could not record run failure")
            await self._cache.invalidate(run.video_id)

        await self._cache.invalidate_owner_views(run.owner_id)
        await self._notifier.notify(
            run.owner_id,
            run.video_id,
            ProcessingFailed(video_id=run.video_id, error=reason),
        )
        raise PipelineRunError(run.video_id, run.phase.value, reason) from error

    async def _ramp(
        self,
        run: _Run,
        stage: str,
        *,
        start: int,
        end: int,
        steps: int,
        duration: float,
    ) -> None:
        """Advance from ``start`` to ``end`` in equal steps spread over ``duration``."""
        increment = (end - start) / steps
        delay = duration / steps
        for i in range(steps + 1):
            await self._advance(run, stage, round_half_up(start + increment * i))
            if i < steps:
                await asyncio.sleep(delay)

    async def _advance(
        self,
        run: _Run,
        stage: str,
        progress: int,
        message: str | None = None,
    ) -> None:
        # Progress never goes backwards within a run
        run.progress = max(run.progress, progress)
        await self._notifier.notify(
            run.owner_id,
            run.video_id,
            ProcessingProgress.at(
                run.video_id,
                run.phase,
                stage,
                run.progress,
                message,
            ),
            generation=run.generation,
        )
