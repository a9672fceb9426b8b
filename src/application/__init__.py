"""Application layer - use cases and orchestration.

This layer contains:
- Services: Pipeline orchestration, classification, notification
- DTOs: Events and read views for API boundaries
"""

from src.application.dtos import (
    PipelineStage,
    ProcessingEvent,
    ProcessingStateResponse,
    StageLabel,
    StartRunResponse,
)
from src.application.services import (
    CacheInvalidationCoordinator,
    PipelineOrchestrator,
    PipelineRunScheduler,
    ProcessingRecordStore,
    ProgressNotifier,
    SensitivityClassifier,
)

__all__ = [
    # DTOs
    "PipelineStage",
    "ProcessingEvent",
    "ProcessingStateResponse",
    "StageLabel",
    "StartRunResponse",
    # Services
    "CacheInvalidationCoordinator",
    "PipelineOrchestrator",
    "PipelineRunScheduler",
    "ProcessingRecordStore",
    "ProgressNotifier",
    "SensitivityClassifier",
]
