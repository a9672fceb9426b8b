"""Application services for the video sensitivity pipeline."""

from src.application.services.cache_invalidation import CacheInvalidationCoordinator
from src.application.services.metadata_probe import MetadataProbe
from src.application.services.moderation_client import ModerationClient
from src.application.services.pipeline import PipelineOrchestrator
from src.application.services.progress_notifier import ProgressNotifier
from src.application.services.record_store import ProcessingRecordStore
from src.application.services.run_scheduler import PipelineRunScheduler
from src.application.services.sensitivity_classifier import SensitivityClassifier

__all__ = [
    "CacheInvalidationCoordinator",
    "MetadataProbe",
    "ModerationClient",
    "PipelineOrchestrator",
    "PipelineRunScheduler",
    "ProcessingRecordStore",
    "ProgressNotifier",
    "SensitivityClassifier",
]
