"""Unit tests for API routes."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from src.api.dependencies import (
    get_cache,
    get_infrastructure_factory,
    get_realtime_channel,
    get_record_store,
    get_run_scheduler,
    get_settings,
)
from src.api.main import create_app
from src.application.services.cache_invalidation import (
    CacheInvalidationCoordinator,
    video_key,
)
from src.application.services.record_store import ProcessingRecordStore
from src.commons.infrastructure.blob.base import HealthStatus
from src.commons.infrastructure.cache.memory_provider import InMemoryCache
from src.commons.infrastructure.documentdb.memory_provider import InMemoryDocumentDB
from src.commons.settings.models import Settings
from src.domain.exceptions import VideoNotFoundException
from src.domain.models.sensitivity import (
    AnalysisMethod,
    SensitivityResult,
    SensitivityStatus,
)
from src.domain.models.video import ProcessingStatus, VideoRecord
from src.domain.value_objects.storage_location import LocalStorage
from tests.fakes import RecordingChannel


@pytest.fixture
def test_settings() -> Settings:
    """Settings for the app under test."""
    return Settings(
        app={"name": "test-app", "environment": "dev"},
        document_db={"provider": "memory"},
        cache={"provider": "memory"},
        moderation={"provider": "disabled"},
    )


def _provider(healthy: bool = True) -> MagicMock:
    provider = MagicMock()
    provider.health_check = AsyncMock(
        return_value=HealthStatus(healthy=healthy, latency_ms=1.234)
    )
    return provider


@pytest.fixture
def mock_factory(test_settings):
    """Create mock infrastructure factory with healthy providers."""
    factory = MagicMock()
    factory.settings = test_settings
    factory.get_document_db.return_value = _provider()
    factory.get_cache.return_value = _provider()
    factory.get_realtime_channel.return_value = _provider()
    factory.get_blob_storage.return_value = _provider()
    return factory


@pytest.fixture
def mock_scheduler():
    """Create mock run scheduler."""
    return AsyncMock()


@pytest.fixture
def api_cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def api_db() -> InMemoryDocumentDB:
    return InMemoryDocumentDB()


@pytest.fixture
def events_channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def api_records(api_db, api_cache) -> ProcessingRecordStore:
    return ProcessingRecordStore(api_db, CacheInvalidationCoordinator(api_cache))


@pytest.fixture
def client(
    test_settings,
    mock_factory,
    mock_scheduler,
    api_cache,
    api_records,
    events_channel,
):
    """Create test client with mocked dependencies."""
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_infrastructure_factory] = lambda: mock_factory
    app.dependency_overrides[get_run_scheduler] = lambda: mock_scheduler
    app.dependency_overrides[get_record_store] = lambda: api_records
    app.dependency_overrides[get_cache] = lambda: api_cache
    app.dependency_overrides[get_realtime_channel] = lambda: events_channel
    yield TestClient(app, raise_server_exceptions=False)


async def _insert(db: InMemoryDocumentDB, **fields) -> VideoRecord:
    record = VideoRecord(
        id="v1",
        owner_id="u1",
        title="Demo",
        original_name="demo.mp4",
        storage=LocalStorage(path="/data/demo.mp4"),
        **fields,
    )
    await db.insert("videos", record.model_dump(mode="json"))
    return record


class TestHealthRoutes:
    """Tests for health check endpoints."""

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert data["environment"] == "dev"
        assert {c["name"] for c in data["components"]} == {
            "document_db",
            "cache",
            "realtime",
            "blob_storage",
        }

    def test_cache_down_degrades(self, client, mock_factory):
        mock_factory.get_cache.return_value = _provider(healthy=False)

        response = client.get("/health")

        assert response.json()["status"] == "degraded"

    def test_document_db_down_is_unhealthy(self, client, mock_factory):
        mock_factory.get_document_db.return_value.health_check.side_effect = (
            ConnectionError("refused")
        )

        data = client.get("/health").json()

        assert data["status"] == "unhealthy"
        db = next(c for c in data["components"] if c["name"] == "document_db")
        assert db["message"] == "refused"

    def test_liveness_check(self, client):
        response = client.get("/health/live")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "ok"}

    def test_readiness_requires_store_and_channel(self, client, mock_factory):
        assert client.get("/health/ready").json()["ready"] is True

        mock_factory.get_realtime_channel.return_value = _provider(healthy=False)

        assert client.get("/health/ready").json()["ready"] is False


class TestProcessingRoutes:
    """Tests for processing endpoints."""

    def test_start_processing(self, client, mock_scheduler):
        response = client.post("/v1/videos/v1/process")

        assert response.status_code == status.HTTP_202_ACCEPTED
        assert response.json() == {
            "video_id": "v1",
            "status": "accepted",
            "message": "Processing started",
        }
        mock_scheduler.start_run.assert_awaited_once_with("v1", None)

    def test_start_processing_for_explicit_owner(self, client, mock_scheduler):
        client.post("/v1/videos/v1/process", params={"owner_id": "admin"})

        mock_scheduler.start_run.assert_awaited_once_with("v1", "admin")

    def test_start_processing_not_found(self, client, mock_scheduler):
        mock_scheduler.start_run.side_effect = VideoNotFoundException("nope")

        response = client.post("/v1/videos/nope/process")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        error = response.json()["error"]
        assert error["code"] == "VIDEO_NOT_FOUND"
        assert error["details"] == {"video_id": "nope"}

    def test_reprocess(self, client, mock_scheduler):
        response = client.post("/v1/videos/v1/reprocess")

        assert response.status_code == status.HTTP_202_ACCEPTED
        assert response.json()["message"] == "Reprocessing started"
        mock_scheduler.reprocess.assert_awaited_once_with("v1", None)

    def test_unexpected_error_is_internal(self, client, mock_scheduler):
        mock_scheduler.start_run.side_effect = RuntimeError("boom")

        response = client.post("/v1/videos/v1/process")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["error"]["code"] == "INTERNAL_ERROR"

    async def test_get_processing_state_populates_cache(
        self, client, api_db, api_cache, test_settings
    ):
        await _insert(
            api_db,
            processing_status=ProcessingStatus.COMPLETED,
            processing_progress=100,
            sensitivity_result=SensitivityResult(
                status=SensitivityStatus.SAFE,
                confidence=0.93,
                analysis_method=AnalysisMethod.HEURISTIC_FALLBACK,
            ),
        )

        response = client.get("/v1/videos/v1/processing")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["videoId"] == "v1"
        assert data["processingStatus"] == "completed"
        assert data["processingProgress"] == 100
        assert data["sensitivityResult"]["confidence"] == 0.93
        assert (await api_cache.get(video_key("v1")))["id"] == "v1"

    async def test_get_processing_state_served_from_cache(
        self, client, api_db, api_cache
    ):
        record = await _insert(api_db, processing_progress=12)
        stale = record.model_copy(update={"processing_progress": 60})
        await api_cache.set(video_key("v1"), stale.model_dump(mode="json"), 60)

        response = client.get("/v1/videos/v1/processing")

        assert response.json()["processingProgress"] == 60

    async def test_write_during_read_through_is_not_cached(
        self, client, api_db, api_records, api_cache
    ):
        await _insert(
            api_db,
            processing_status=ProcessingStatus.PROCESSING,
            processing_progress=95,
            run_generation=1,
        )
        real_load = api_records.load
        loads = 0

        async def load_then_complete(video_id):
            nonlocal loads
            loads += 1
            record = await real_load(video_id)
            if loads == 1:
                await api_records.write(
                    video_id,
                    1,
                    {
                        "processing_status": ProcessingStatus.COMPLETED,
                        "processing_progress": 100,
                    },
                )
            return record

        with patch.object(api_records, "load", side_effect=load_then_complete):
            first = client.get("/v1/videos/v1/processing")

        second = client.get("/v1/videos/v1/processing")

        assert first.json()["processingStatus"] == "completed"
        assert second.json()["processingStatus"] == "completed"
        assert second.json()["processingProgress"] == 100
        assert await api_cache.get(video_key("v1")) is None

    def test_get_processing_state_not_found(self, client):
        response = client.get("/v1/videos/missing/processing")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"


class TestRealtimeRoutes:
    """Tests for the processing event WebSocket."""

    def test_relays_user_events(self, client, events_channel):
        events_channel.sent.extend(
            [
                ("u1", "video:processing:start", {"videoId": "v1", "title": "Demo"}),
                ("u2", "video:processing:start", {"videoId": "v2", "title": "x"}),
                ("u1", "video:processing:progress", {"videoId": "v1", "progress": 4}),
            ]
        )

        with client.websocket_connect("/v1/ws/processing/u1") as websocket:
            first = websocket.receive_json()
            second = websocket.receive_json()

        assert first == {
            "event": "video:processing:start",
            "data": {"videoId": "v1", "title": "Demo"},
        }
        assert second["event"] == "video:processing:progress"
        assert second["data"]["progress"] == 4
