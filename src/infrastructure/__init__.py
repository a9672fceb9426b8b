"""Infrastructure layer - external service implementations."""

from src.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)
from src.infrastructure.moderation import (
    ModerationJobResult,
    ModerationJobStatus,
    ModerationServiceBase,
    RekognitionModerationService,
)
from src.infrastructure.video import FFprobeInspector, VideoInfo, VideoInspectorBase

__all__ = [
    # Factory
    "InfrastructureFactory",
    "get_factory",
    "reset_factory",
    # Moderation
    "ModerationServiceBase",
    "ModerationJobResult",
    "ModerationJobStatus",
    "RekognitionModerationService",
    # Video
    "VideoInspectorBase",
    "VideoInfo",
    "FFprobeInspector",
]
