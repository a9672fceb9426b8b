"""Video inspection abstractions and implementations."""

from src.infrastructure.video.base import VideoInfo, VideoInspectorBase
from src.infrastructure.video.ffprobe_inspector import FFprobeInspector

__all__ = [
    # Base classes
    "VideoInfo",
    "VideoInspectorBase",
    # Implementations
    "FFprobeInspector",
]
