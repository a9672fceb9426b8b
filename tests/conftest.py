"""Shared fixtures for pipeline tests."""

import random
from typing import Any

import pytest

from src.application.services.cache_invalidation import CacheInvalidationCoordinator
from src.application.services.metadata_probe import MetadataProbe
from src.application.services.pipeline import PipelineOrchestrator
from src.application.services.progress_notifier import ProgressNotifier
from src.application.services.record_store import ProcessingRecordStore
from src.application.services.sensitivity_classifier import SensitivityClassifier
from src.commons.infrastructure.documentdb.memory_provider import InMemoryDocumentDB
from src.commons.settings.models import ClassifierSettings, PipelineSettings
from src.domain.models.video import VideoRecord
from src.domain.value_objects.storage_location import LocalStorage, RemoteStorage
from tests.fakes import (
    CountingCache,
    NeverFlagRandom,
    RecordingChannel,
    StaticInspector,
)


@pytest.fixture
def fast_pipeline_settings() -> PipelineSettings:
    """Pipeline settings with all delays removed."""
    return PipelineSettings(
        validation_duration_seconds=0,
        metadata_step_delay_seconds=0,
        simulated_analysis_duration_seconds=0,
        fallback_duration_seconds=0,
        reporting_duration_seconds=0,
    )


@pytest.fixture
def document_db() -> InMemoryDocumentDB:
    return InMemoryDocumentDB()


@pytest.fixture
def cache() -> CountingCache:
    return CountingCache()


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def cache_invalidation(cache) -> CacheInvalidationCoordinator:
    return CacheInvalidationCoordinator(cache)


@pytest.fixture
def record_store(document_db, cache_invalidation) -> ProcessingRecordStore:
    return ProcessingRecordStore(document_db, cache_invalidation)


@pytest.fixture
def notifier(channel, record_store) -> ProgressNotifier:
    return ProgressNotifier(channel, record_store, delivery_timeout_seconds=1.0)


@pytest.fixture
def inspector() -> StaticInspector:
    return StaticInspector()


@pytest.fixture
def quiet_classifier() -> SensitivityClassifier:
    """Classifier whose probabilistic heuristics never fire."""
    return SensitivityClassifier(ClassifierSettings(), NeverFlagRandom())


@pytest.fixture
def orchestrator_factory(
    record_store,
    notifier,
    cache_invalidation,
    inspector,
    quiet_classifier,
    fast_pipeline_settings,
):
    """Build an orchestrator, optionally with a moderation client."""

    def _build(
        moderation_client=None,
        blob_storage=None,
        *,
        video_inspector=None,
        classifier=None,
    ) -> PipelineOrchestrator:
        return PipelineOrchestrator(
            record_store=record_store,
            notifier=notifier,
            cache_invalidation=cache_invalidation,
            metadata_probe=MetadataProbe(
                video_inspector or inspector,
                blob_storage,
                rng=random.Random(3),
            ),
            classifier=classifier or quiet_classifier,
            settings=fast_pipeline_settings,
            moderation_client=moderation_client,
        )

    return _build


@pytest.fixture
def make_video(document_db):
    """Insert a video record and return it."""

    async def _make(
        original_name: str = "team_standup.mp4",
        *,
        title: str = "",
        size_bytes: int = 10 * 1024 * 1024,
        remote: bool = False,
        owner_id: str = "user-1",
        **fields: Any,
    ) -> VideoRecord:
        storage = (
            RemoteStorage(bucket="sentinel-videos", key=f"uploads/{original_name}")
            if remote
            else LocalStorage(path=f"/data/uploads/{original_name}")
        )
        record = VideoRecord(
            owner_id=owner_id,
            title=title,
            original_name=original_name,
            size_bytes=size_bytes,
            storage=storage,
            **fields,
        )
        await document_db.insert("videos", record.model_dump(mode="json"))
        return record

    return _make
