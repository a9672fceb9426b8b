"""Unit tests for Application DTOs."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from src.application.dtos.processing import (
    PipelineStage,
    ProbeResult,
    ProcessingCompleted,
    ProcessingFailed,
    ProcessingProgress,
    ProcessingStarted,
    ProcessingStateResponse,
    StartRunResponse,
)
from src.domain.models.sensitivity import (
    AnalysisMethod,
    SensitivityResult,
    SensitivityStatus,
)
from src.domain.models.video import ProcessingStatus, Resolution, VideoRecord
from src.domain.value_objects.storage_location import LocalStorage


class TestProcessingProgress:
    """Tests for ProcessingProgress DTO."""

    def test_default_message(self):
        """Message defaults to stage and percentage."""
        event = ProcessingProgress.at(
            "v1", PipelineStage.REPORTING, "Generating sensitivity report", 86
        )
        assert event.message == "Generating sensitivity report... 86%"

    def test_custom_message(self):
        event = ProcessingProgress.at(
            "v1", PipelineStage.METADATA, "Extracting video metadata", 40, "Done"
        )
        assert event.message == "Done"

    def test_progress_bounds(self):
        """Test progress must be within 0-100."""
        with pytest.raises(ValidationError):
            ProcessingProgress.at("v1", PipelineStage.VALIDATION, "x", 101)
        with pytest.raises(ValidationError):
            ProcessingProgress.at("v1", PipelineStage.VALIDATION, "x", -1)

    def test_payload_uses_camel_case(self):
        event = ProcessingProgress.at("v1", PipelineStage.VALIDATION, "x", 4)
        assert set(event.payload()) == {
            "videoId",
            "stage",
            "progress",
            "message",
            "phase",
        }

    def test_event_names(self):
        assert ProcessingStarted.event_name == "video:processing:start"
        assert ProcessingProgress.event_name == "video:processing:progress"
        assert ProcessingCompleted.event_name == "video:processing:complete"
        assert ProcessingFailed.event_name == "video:processing:error"


class TestProcessingCompleted:
    """Tests for ProcessingCompleted DTO."""

    def test_from_result(self):
        result = SensitivityResult(
            status=SensitivityStatus.FLAGGED,
            confidence=0.82,
            reasons=["Content may contain: gore"],
            analysis_method=AnalysisMethod.HEURISTIC_FALLBACK,
        )

        event = ProcessingCompleted.from_result(
            "v1",
            result,
            duration=42.0,
            resolution=Resolution(width=1280, height=720),
        )

        assert event.payload() == {
            "videoId": "v1",
            "status": "flagged",
            "confidence": 0.82,
            "reasons": ["Content may contain: gore"],
            "duration": 42.0,
            "resolution": {"width": 1280, "height": 720},
        }

    def test_missing_metadata_is_null(self):
        result = SensitivityResult(
            status=SensitivityStatus.SAFE,
            confidence=0.9,
            analysis_method=AnalysisMethod.HEURISTIC_FALLBACK,
        )

        payload = ProcessingCompleted.from_result(
            "v1", result, duration=None, resolution=None
        ).payload()

        assert payload["duration"] is None
        assert payload["resolution"] is None


class TestProcessingFailed:
    """Tests for ProcessingFailed DTO."""

    def test_default_error(self):
        assert ProcessingFailed(video_id="v1").error == "Processing failed"


class TestProbeResult:
    """Tests for ProbeResult DTO."""

    def test_defaults(self):
        result = ProbeResult()
        assert result.duration_seconds is None
        assert result.resolution is None
        assert result.estimated is False

    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError):
            ProbeResult(duration_seconds=-1)


class TestProcessingStateResponse:
    """Tests for ProcessingStateResponse DTO."""

    def test_from_record(self):
        processed = datetime(2024, 5, 1, tzinfo=UTC)
        record = VideoRecord(
            id="v1",
            owner_id="u1",
            title="Demo",
            original_name="demo.mp4",
            size_bytes=1024,
            storage=LocalStorage(path="/data/demo.mp4"),
            processing_status=ProcessingStatus.COMPLETED,
            processing_progress=100,
            duration_seconds=61.0,
            resolution=Resolution(width=640, height=360),
            processed_at=processed,
        )

        response = ProcessingStateResponse.from_record(record)

        assert response.video_id == "v1"
        assert response.processing_status == ProcessingStatus.COMPLETED
        assert response.duration == 61.0
        assert response.processed_at == processed
        dumped = response.model_dump(by_alias=True)
        assert "processingProgress" in dumped
        assert "metadataEstimated" in dumped


class TestStartRunResponse:
    """Tests for StartRunResponse DTO."""

    def test_default_status(self):
        response = StartRunResponse(video_id="v1", message="Processing started")
        assert response.status == "accepted"
