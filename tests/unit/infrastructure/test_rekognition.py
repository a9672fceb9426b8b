"""Unit tests for the Rekognition moderation service."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from src.domain.exceptions import ModerationServiceError
from src.domain.value_objects.storage_location import RemoteStorage
from src.infrastructure.moderation.base import ModerationJobStatus
from src.infrastructure.moderation.rekognition import RekognitionModerationService


def _label(name: str, parent: str = "", confidence: float = 90.0, ts: int = 0):
    return {
        "Timestamp": ts,
        "ModerationLabel": {
            "Name": name,
            "ParentName": parent,
            "Confidence": confidence,
        },
    }


def _client_error(operation: str) -> ClientError:
    return ClientError(
        {"Error": {"Code": "AccessDeniedException", "Message": "denied"}},
        operation,
    )


class TestRekognitionModerationService:
    """Tests for RekognitionModerationService with a mocked boto3 client."""

    @pytest.fixture
    def client(self):
        return MagicMock()

    @pytest.fixture
    def service(self, client):
        return RekognitionModerationService(
            "us-east-1", min_confidence=60.0, client=client
        )

    @pytest.fixture
    def storage(self):
        return RemoteStorage(bucket="videos", key="u1/clip.mp4")

    async def test_submit(self, service, client, storage):
        client.start_content_moderation.return_value = {"JobId": "job-1"}

        job_id = await service.submit(storage)

        assert job_id == "job-1"
        client.start_content_moderation.assert_called_once_with(
            Video={"S3Object": {"Bucket": "videos", "Name": "u1/clip.mp4"}},
            MinConfidence=60.0,
        )

    async def test_submit_with_notification_channel(self, client, storage):
        service = RekognitionModerationService(
            "us-east-1",
            sns_topic_arn="arn:sns",
            role_arn="arn:role",
            client=client,
        )
        client.start_content_moderation.return_value = {"JobId": "job-1"}

        await service.submit(storage)

        kwargs = client.start_content_moderation.call_args.kwargs
        assert kwargs["NotificationChannel"] == {
            "SNSTopicArn": "arn:sns",
            "RoleArn": "arn:role",
        }

    async def test_submit_client_error(self, service, client, storage):
        client.start_content_moderation.side_effect = _client_error(
            "StartContentModeration"
        )

        with pytest.raises(ModerationServiceError):
            await service.submit(storage)

    async def test_submit_without_job_id(self, service, client, storage):
        client.start_content_moderation.return_value = {}

        with pytest.raises(ModerationServiceError):
            await service.submit(storage)

    async def test_poll_in_progress(self, service, client):
        client.get_content_moderation.return_value = {"JobStatus": "IN_PROGRESS"}

        result = await service.poll("job-1")

        assert result.status == ModerationJobStatus.IN_PROGRESS
        assert not result.is_finished
        assert result.findings == []

    async def test_poll_failed_keeps_status_message(self, service, client):
        client.get_content_moderation.return_value = {
            "JobStatus": "FAILED",
            "StatusMessage": "Unsupported codec",
        }

        result = await service.poll("job-1")

        assert result.status == ModerationJobStatus.FAILED
        assert result.status_message == "Unsupported codec"

    async def test_poll_follows_pagination(self, service, client):
        client.get_content_moderation.side_effect = [
            {
                "JobStatus": "SUCCEEDED",
                "ModerationLabels": [
                    _label("Graphic Male Nudity", "Explicit Nudity", 91.2, 1000)
                ],
                "NextToken": "page-2",
            },
            {
                "ModerationLabels": [
                    _label("Weapons", "Violence", 80.0, 5000),
                    {"Timestamp": 6000, "ModerationLabel": {}},
                ]
            },
        ]

        result = await service.poll("job-1")

        assert result.status == ModerationJobStatus.SUCCEEDED
        assert [(f.label, f.category) for f in result.findings] == [
            ("Graphic Male Nudity", "Explicit Nudity"),
            ("Weapons", "Violence"),
        ]
        assert result.findings[0].timestamp_ms == 1000
        last_call = client.get_content_moderation.call_args_list[-1]
        assert last_call.kwargs["NextToken"] == "page-2"

    async def test_poll_unknown_status(self, service, client):
        client.get_content_moderation.return_value = {"JobStatus": "EXPLODED"}

        with pytest.raises(ModerationServiceError):
            await service.poll("job-1")

    async def test_poll_client_error(self, service, client):
        client.get_content_moderation.side_effect = _client_error(
            "GetContentModeration"
        )

        with pytest.raises(ModerationServiceError) as exc_info:
            await service.poll("job-1")

        assert exc_info.value.job_id == "job-1"
