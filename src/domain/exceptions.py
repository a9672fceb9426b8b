"""Domain exceptions for the video sensitivity pipeline."""


class DomainException(Exception):
    """Base exception for domain errors."""


class VideoNotFoundException(DomainException):
    """Raised when a requested video record does not exist."""

    def __init__(self, video_id: str) -> None:
        self.video_id = video_id
        super().__init__(f"Video not found: {video_id}")


class ModerationServiceError(DomainException):
    """Raised when the moderation service cannot be reached or answers badly."""

    def __init__(self, reason: str, *, job_id: str | None = None) -> None:
        self.reason = reason
        self.job_id = job_id
        super().__init__(f"Moderation service error: {reason}")


class ModerationJobFailedError(ModerationServiceError):
    """Raised when a moderation job ends in FAILED state."""

    def __init__(self, job_id: str, status_message: str | None = None) -> None:
        self.status_message = status_message or "Analysis failed"
        super().__init__(
            f"Job {job_id} failed: {self.status_message}",
            job_id=job_id,
        )


class ModerationTimeoutError(ModerationServiceError):
    """Raised when a moderation job is still running after the last poll."""

    def __init__(self, job_id: str, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(
            f"Job {job_id} did not finish after {attempts} polling attempts",
            job_id=job_id,
        )


class MetadataProbeError(DomainException):
    """Raised when a video file cannot be inspected."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Could not inspect {source}: {reason}")


class RunSupersededException(DomainException):
    """Raised when a newer run has claimed the video record.

    The holder of the stale generation must stop without writing or
    notifying further.
    """

    def __init__(self, video_id: str, generation: int) -> None:
        self.video_id = video_id
        self.generation = generation
        super().__init__(
            f"Run generation {generation} for video {video_id} was superseded"
        )


class PipelineRunError(DomainException):
    """Raised when a pipeline run fails and the record was marked failed."""

    def __init__(self, video_id: str, stage: str, reason: str) -> None:
        self.video_id = video_id
        self.stage = stage
        self.reason = reason
        super().__init__(f"Processing failed for {video_id} at {stage}: {reason}")
