"""Abstract base class for video file inspection."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass
class VideoInfo:
    """Information about a video file."""

    path: Path
    duration_seconds: float
    width: int
    height: int
    fps: float
    codec: str
    bitrate: int
    has_audio: bool
    file_size_bytes: int


class VideoInspectorBase(ABC):
    """Reads container and stream metadata from a local video file.

    Implementations should handle:
    - ffprobe (FFmpeg)
    """

    @abstractmethod
    async def get_video_info(self, video_path: Path) -> VideoInfo:
        """Inspect a video file.

        Args:
            video_path: Path to a local video file.

        Returns:
            Parsed video information.

        Raises:
            MetadataProbeError: If the file cannot be read or has no video stream.
        """
