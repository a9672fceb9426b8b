"""Domain models."""

from src.domain.models.sensitivity import (
    DEFAULT_SAFE_REASON,
    AnalysisMethod,
    ModerationFinding,
    SensitivityResult,
    SensitivityStatus,
)
from src.domain.models.video import (
    FAILED_STAGE_LABEL,
    ProcessingStatus,
    Resolution,
    VideoRecord,
)

__all__ = [
    # Video
    "VideoRecord",
    "ProcessingStatus",
    "Resolution",
    "FAILED_STAGE_LABEL",
    # Sensitivity
    "SensitivityResult",
    "SensitivityStatus",
    "AnalysisMethod",
    "ModerationFinding",
    "DEFAULT_SAFE_REASON",
]
