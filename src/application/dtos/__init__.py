"""Data Transfer Objects for application layer."""

from src.application.dtos.processing import (
    PipelineStage,
    ProbeResult,
    ProcessingCompleted,
    ProcessingEvent,
    ProcessingFailed,
    ProcessingProgress,
    ProcessingStarted,
    ProcessingStateResponse,
    StageLabel,
    StartRunResponse,
)

__all__ = [
    # Pipeline
    "PipelineStage",
    "StageLabel",
    "ProbeResult",
    # Events
    "ProcessingEvent",
    "ProcessingStarted",
    "ProcessingProgress",
    "ProcessingCompleted",
    "ProcessingFailed",
    # Read views
    "ProcessingStateResponse",
    "StartRunResponse",
]
