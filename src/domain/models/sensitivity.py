"""Sensitivity verdict and moderation finding models."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

DEFAULT_SAFE_REASON = "Content passed all safety checks"


class SensitivityStatus(str, Enum):
    """Verdict of a completed analysis."""

    SAFE = "safe"
    FLAGGED = "flagged"


class AnalysisMethod(str, Enum):
    """How the verdict was reached."""

    EXTERNAL_MODERATION = "external-moderation"
    HEURISTIC_FALLBACK = "heuristic-fallback"


class ModerationFinding(BaseModel):
    """A single label reported by the moderation service."""

    label: str = Field(min_length=1, description="Detected label, e.g. 'Nudity'")
    parent_category: str = Field(
        default="",
        description="Parent label, empty for top-level labels",
    )
    confidence: float = Field(ge=0, le=100, description="Percent confidence")
    timestamp_ms: int | None = Field(
        default=None,
        ge=0,
        description="Offset of the detection within the video",
    )

    @property
    def category(self) -> str:
        """Grouping key: the parent category, or the label itself."""
        return self.parent_category or self.label


class SensitivityResult(BaseModel):
    """Outcome of the sensitivity classifier."""

    status: SensitivityStatus
    confidence: float = Field(ge=0, le=1)
    reasons: list[str] = Field(default_factory=lambda: [DEFAULT_SAFE_REASON])
    analysis_method: AnalysisMethod
    analyzed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("reasons")
    @classmethod
    def ensure_reasons(cls, v: list[str]) -> list[str]:
        """An empty reasons list is replaced with the default safe reason."""
        return v or [DEFAULT_SAFE_REASON]

    @property
    def is_flagged(self) -> bool:
        return self.status == SensitivityStatus.FLAGGED
