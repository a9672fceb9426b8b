"""Domain layer - business models and logic."""

from src.domain.exceptions import (
    DomainException,
    MetadataProbeError,
    ModerationJobFailedError,
    ModerationServiceError,
    ModerationTimeoutError,
    PipelineRunError,
    RunSupersededException,
    VideoNotFoundException,
)
from src.domain.models import (
    AnalysisMethod,
    ModerationFinding,
    ProcessingStatus,
    Resolution,
    SensitivityResult,
    SensitivityStatus,
    VideoRecord,
)
from src.domain.value_objects import LocalStorage, RemoteStorage, StorageLocation

__all__ = [
    # Exceptions
    "DomainException",
    "VideoNotFoundException",
    "ModerationServiceError",
    "ModerationJobFailedError",
    "ModerationTimeoutError",
    "MetadataProbeError",
    "RunSupersededException",
    "PipelineRunError",
    # Video
    "VideoRecord",
    "ProcessingStatus",
    "Resolution",
    # Sensitivity
    "SensitivityResult",
    "SensitivityStatus",
    "AnalysisMethod",
    "ModerationFinding",
    # Value Objects
    "LocalStorage",
    "RemoteStorage",
    "StorageLocation",
]
