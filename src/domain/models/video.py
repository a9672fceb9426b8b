"""Video record domain model."""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field

from src.domain.models.sensitivity import SensitivityResult
from src.domain.value_objects.storage_location import StorageLocation

FAILED_STAGE_LABEL = "Failed"


class ProcessingStatus(str, Enum):
    """Lifecycle status of a video's sensitivity analysis."""

    PENDING = "pending"  # Uploaded, or reset for reprocessing
    PROCESSING = "processing"  # A pipeline run owns the record
    COMPLETED = "completed"  # Result available
    FAILED = "failed"  # Run aborted


class Resolution(BaseModel):
    """Frame size in pixels."""

    width: int = Field(gt=0)
    height: int = Field(gt=0)

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


class VideoRecord(BaseModel):
    """Persistent record of an uploaded video and its analysis state.

    The pipeline is the only writer of the processing fields. ``run_generation``
    is bumped whenever a run claims the record or the record is reset, and every
    write a run makes is conditional on the generation it claimed.
    """

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Opaque record id",
    )
    owner_id: str = Field(description="User who uploaded the video")
    title: str = Field(default="", description="User-supplied title")
    original_name: str = Field(default="", description="Uploaded file name")
    size_bytes: int = Field(default=0, ge=0, description="Uploaded file size")
    storage: StorageLocation = Field(description="Where the asset lives")

    processing_status: ProcessingStatus = Field(default=ProcessingStatus.PENDING)
    processing_progress: int = Field(default=0, ge=0, le=100)
    current_stage: str | None = Field(
        default=None,
        description="Active stage label, 'Failed' after failure",
    )
    sensitivity_result: SensitivityResult | None = None
    error_message: str | None = Field(
        default=None,
        description="Short failure reason if status is FAILED",
    )

    duration_seconds: float | None = Field(default=None, ge=0)
    resolution: Resolution | None = None
    metadata_estimated: bool = Field(
        default=False,
        description="True when duration/resolution are placeholders",
    )

    run_generation: int = Field(default=0, ge=0)
    processed_at: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_processing(self) -> bool:
        return self.processing_status == ProcessingStatus.PROCESSING

    @property
    def is_terminal(self) -> bool:
        """Completed or failed."""
        return self.processing_status in {
            ProcessingStatus.COMPLETED,
            ProcessingStatus.FAILED,
        }
