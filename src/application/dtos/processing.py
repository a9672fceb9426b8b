"""DTOs for the sensitivity pipeline: stages, events and read views."""

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.domain.models.sensitivity import SensitivityResult, SensitivityStatus
from src.domain.models.video import ProcessingStatus, Resolution, VideoRecord


class PipelineStage(str, Enum):
    """Ordered phases of a pipeline run."""

    VALIDATION = "validation"
    METADATA = "metadata"
    MODERATION = "moderation"
    REPORTING = "reporting"
    FINALIZATION = "finalization"


class StageLabel:
    """Human-readable stage labels shown to clients."""

    VALIDATION = "Validating file integrity"
    METADATA = "Extracting video metadata"
    METADATA_DOWNLOAD = "Downloading video for analysis"
    SIMULATED_ANALYSIS = "Analyzing video frames for content"
    MODERATION_START = "Starting content moderation analysis"
    MODERATION_SUBMITTED = "Content moderation processing"
    MODERATION_POLLING = "Content moderation analyzing"
    MODERATION_DONE = "Content analysis complete"
    MODERATION_FALLBACK = "Analyzing video frames (fallback)"
    REPORTING = "Generating sensitivity report"
    FINALIZATION = "Finalizing results"
    COMPLETE = "Complete"


class _EventModel(BaseModel):
    """Event payloads serialize with camelCase keys for browser clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    event_name: ClassVar[str]

    video_id: str

    def payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ProcessingStarted(_EventModel):
    """A run claimed the record."""

    event_name: ClassVar[str] = "video:processing:start"

    title: str
    message: str = "Processing started"


class ProcessingProgress(_EventModel):
    """Progress update within a stage."""

    event_name: ClassVar[str] = "video:processing:progress"

    stage: str = Field(description="Human-readable stage label")
    progress: int = Field(ge=0, le=100)
    message: str
    phase: PipelineStage

    @classmethod
    def at(
        cls,
        video_id: str,
        phase: PipelineStage,
        stage: str,
        progress: int,
        message: str | None = None,
    ) -> "ProcessingProgress":
        """Build an update whose default message is ``"{stage}... {progress}%"``."""
        return cls(
            video_id=video_id,
            phase=phase,
            stage=stage,
            progress=progress,
            message=message or f"{stage}... {progress}%",
        )


class ProcessingCompleted(_EventModel):
    """A run finished with a verdict."""

    event_name: ClassVar[str] = "video:processing:complete"

    status: SensitivityStatus
    confidence: float
    reasons: list[str]
    duration: float | None = None
    resolution: Resolution | None = None

    @classmethod
    def from_result(
        cls,
        video_id: str,
        result: SensitivityResult,
        duration: float | None,
        resolution: Resolution | None,
    ) -> "ProcessingCompleted":
        return cls(
            video_id=video_id,
            status=result.status,
            confidence=result.confidence,
            reasons=list(result.reasons),
            duration=duration,
            resolution=resolution,
        )


class ProcessingFailed(_EventModel):
    """A run was aborted."""

    event_name: ClassVar[str] = "video:processing:error"

    error: str = "Processing failed"


ProcessingEvent = (
    ProcessingStarted | ProcessingProgress | ProcessingCompleted | ProcessingFailed
)


class ProbeResult(BaseModel):
    """Duration and resolution from the metadata probe."""

    duration_seconds: float | None = Field(default=None, ge=0)
    resolution: Resolution | None = None
    estimated: bool = Field(
        default=False,
        description="True when values are placeholders, not inspected",
    )


class ProcessingStateResponse(BaseModel):
    """Read view of a video's processing state."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    video_id: str
    title: str
    processing_status: ProcessingStatus
    processing_progress: int
    current_stage: str | None = None
    sensitivity_result: SensitivityResult | None = None
    error_message: str | None = None
    duration: float | None = None
    resolution: Resolution | None = None
    metadata_estimated: bool = False
    processed_at: datetime | None = None
    updated_at: datetime

    @classmethod
    def from_record(cls, record: VideoRecord) -> "ProcessingStateResponse":
        return cls(
            video_id=record.id,
            title=record.title,
            processing_status=record.processing_status,
            processing_progress=record.processing_progress,
            current_stage=record.current_stage,
            sensitivity_result=record.sensitivity_result,
            error_message=record.error_message,
            duration=record.duration_seconds,
            resolution=record.resolution,
            metadata_estimated=record.metadata_estimated,
            processed_at=record.processed_at,
            updated_at=record.updated_at,
        )


class StartRunResponse(BaseModel):
    """Acknowledgement of a scheduled run."""

    video_id: str
    status: str = Field(default="accepted")
    message: str
