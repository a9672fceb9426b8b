"""Content moderation service abstractions and implementations."""

from src.infrastructure.moderation.base import (
    ModerationJobResult,
    ModerationJobStatus,
    ModerationServiceBase,
)
from src.infrastructure.moderation.rekognition import RekognitionModerationService

__all__ = [
    # Base classes
    "ModerationServiceBase",
    "ModerationJobResult",
    "ModerationJobStatus",
    # Implementations
    "RekognitionModerationService",
]
