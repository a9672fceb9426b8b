"""AWS Rekognition Video implementation of content moderation."""

import asyncio
from collections.abc import Callable
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.commons.telemetry import get_logger
from src.domain.exceptions import ModerationServiceError
from src.domain.models.sensitivity import ModerationFinding
from src.domain.value_objects.storage_location import RemoteStorage
from src.infrastructure.moderation.base import (
    ModerationJobResult,
    ModerationJobStatus,
    ModerationServiceBase,
)

_MAX_PAGES = 100


def _finding_from_item(item: dict[str, Any]) -> ModerationFinding | None:
    label = item.get("ModerationLabel") or {}
    name = label.get("Name")
    if not name:
        return None
    return ModerationFinding(
        label=name,
        parent_category=label.get("ParentName") or "",
        confidence=float(label.get("Confidence") or 0.0),
        timestamp_ms=item.get("Timestamp"),
    )


class RekognitionModerationService(ModerationServiceBase):
    """Content moderation via ``StartContentModeration`` / ``GetContentModeration``.

    boto3 is synchronous, so calls run in the default executor.
    """

    def __init__(
        self,
        region: str,
        *,
        min_confidence: float = 70.0,
        sns_topic_arn: str | None = None,
        role_arn: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        client: Any | None = None,
    ) -> None:
        """Initialize the Rekognition client.

        Args:
            region: AWS region of the bucket and Rekognition endpoint.
            min_confidence: Labels below this percent are not reported.
            sns_topic_arn: Optional completion notification topic.
            role_arn: IAM role Rekognition assumes to publish to the topic.
            access_key_id: Explicit credentials; default chain if omitted.
            secret_access_key: Explicit credentials; default chain if omitted.
            client: Pre-built boto3 client, mainly for tests.
        """
        self._client = client or boto3.client(
            "rekognition",
            region_name=region,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )
        self._min_confidence = min_confidence
        self._sns_topic_arn = sns_topic_arn
        self._role_arn = role_arn
        self._logger = get_logger(__name__)

    async def _call(
        self,
        fn: Callable[..., dict[str, Any]],
        **kwargs: Any,
    ) -> dict[str, Any]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: fn(**kwargs))

    async def submit(self, storage: RemoteStorage) -> str:
        request: dict[str, Any] = {
            "Video": {"S3Object": {"Bucket": storage.bucket, "Name": storage.key}},
            "MinConfidence": self._min_confidence,
        }
        if self._sns_topic_arn and self._role_arn:
            request["NotificationChannel"] = {
                "SNSTopicArn": self._sns_topic_arn,
                "RoleArn": self._role_arn,
            }

        try:
            response = await self._call(
                self._client.start_content_moderation, **request
            )
        except (ClientError, BotoCoreError) as e:
            raise ModerationServiceError(f"start_content_moderation failed: {e}") from e

        job_id = response.get("JobId")
        if not job_id:
            raise ModerationServiceError("start_content_moderation returned no JobId")

        self._logger.info(
            "Moderation job started",
            extra={"job_id": job_id, "object": storage.uri},
        )
        return str(job_id)

    async def poll(self, job_id: str) -> ModerationJobResult:
        try:
            response = await self._call(
                self._client.get_content_moderation,
                JobId=job_id,
                SortBy="TIMESTAMP",
            )
        except (ClientError, BotoCoreError) as e:
            raise ModerationServiceError(
                f"get_content_moderation failed: {e}", job_id=job_id
            ) from e

        raw_status = response.get("JobStatus", ModerationJobStatus.IN_PROGRESS.value)
        try:
            status = ModerationJobStatus(raw_status)
        except ValueError as e:
            raise ModerationServiceError(
                f"unknown job status {raw_status!r}", job_id=job_id
            ) from e

        if status != ModerationJobStatus.SUCCEEDED:
            return ModerationJobResult(
                job_id=job_id,
                status=status,
                status_message=response.get("StatusMessage"),
            )

        items = list(response.get("ModerationLabels", []))
        items.extend(await self._remaining_pages(job_id, response.get("NextToken")))
        findings = [f for f in map(_finding_from_item, items) if f is not None]
        return ModerationJobResult(job_id=job_id, status=status, findings=findings)

    async def _remaining_pages(
        self,
        job_id: str,
        next_token: str | None,
    ) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        pages = 0
        while next_token and pages < _MAX_PAGES:
            try:
                page = await self._call(
                    self._client.get_content_moderation,
                    JobId=job_id,
                    SortBy="TIMESTAMP",
                    NextToken=next_token,
                )
            except (ClientError, BotoCoreError) as e:
                raise ModerationServiceError(
                    f"get_content_moderation page failed: {e}", job_id=job_id
                ) from e
            items.extend(page.get("ModerationLabels", []))
            next_token = page.get("NextToken")
            pages += 1
        return items
