"""Abstract base class for external content moderation services."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from src.domain.models.sensitivity import ModerationFinding
from src.domain.value_objects.storage_location import RemoteStorage


class ModerationJobStatus(str, Enum):
    """State of an asynchronous moderation job."""

    IN_PROGRESS = "IN_PROGRESS"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


@dataclass
class ModerationJobResult:
    """One poll of a moderation job."""

    job_id: str
    status: ModerationJobStatus
    findings: list[ModerationFinding] = field(default_factory=list)
    status_message: str | None = None

    @property
    def is_finished(self) -> bool:
        return self.status != ModerationJobStatus.IN_PROGRESS


class ModerationServiceBase(ABC):
    """Asynchronous video moderation: submit a job, then poll it.

    Implementations should handle:
    - AWS Rekognition Video content moderation
    """

    @abstractmethod
    async def submit(self, storage: RemoteStorage) -> str:
        """Start a moderation job for an object in a bucket.

        Args:
            storage: Location of the video object.

        Returns:
            Service job id.

        Raises:
            ModerationServiceError: If the job could not be started.
        """

    @abstractmethod
    async def poll(self, job_id: str) -> ModerationJobResult:
        """Fetch job status, with every finding once the job has succeeded.

        Raises:
            ModerationServiceError: If the service could not be queried.
        """
