"""ffprobe implementation of video inspection."""

import asyncio
import json
import subprocess
from pathlib import Path
from typing import Any

from src.domain.exceptions import MetadataProbeError
from src.infrastructure.video.base import VideoInfo, VideoInspectorBase


def _parse_frame_rate(value: str) -> float:
    if "/" in value:
        num, den = value.split("/", 1)
        return float(num) / float(den) if float(den) != 0 else 0.0
    return float(value)


class FFprobeInspector(VideoInspectorBase):
    """Runs ``ffprobe`` and parses its JSON output.

    Requires ffprobe to be installed and available in PATH.
    """

    def __init__(self, ffprobe_path: str = "ffprobe", timeout_seconds: float = 60.0):
        self._ffprobe = ffprobe_path
        self._timeout = timeout_seconds

    async def get_video_info(self, video_path: Path) -> VideoInfo:
        """Get container and first video stream information."""
        cmd = [
            self._ffprobe,
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_format",
            "-show_streams",
            str(video_path),
        ]

        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(
                None,
                lambda: subprocess.run(
                    cmd,
                    capture_output=True,
                    check=True,
                    timeout=self._timeout,
                ),
            )
            data: dict[str, Any] = json.loads(result.stdout)
        except FileNotFoundError as e:
            raise MetadataProbeError(str(video_path), "ffprobe not installed") from e
        except subprocess.CalledProcessError as e:
            raise MetadataProbeError(
                str(video_path), f"ffprobe exited with {e.returncode}"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise MetadataProbeError(str(video_path), "ffprobe timed out") from e
        except json.JSONDecodeError as e:
            raise MetadataProbeError(
                str(video_path), "unreadable ffprobe output"
            ) from e

        return self._parse(video_path, data)

    def _parse(self, video_path: Path, data: dict[str, Any]) -> VideoInfo:
        streams = data.get("streams", [])
        video_stream = next(
            (s for s in streams if s.get("codec_type") == "video"), None
        )
        if video_stream is None:
            raise MetadataProbeError(str(video_path), "no video stream")

        has_audio = any(s.get("codec_type") == "audio" for s in streams)
        format_info = data.get("format", {})

        # Some containers only report duration on the stream
        duration = format_info.get("duration") or video_stream.get("duration") or 0

        try:
            return VideoInfo(
                path=video_path,
                duration_seconds=float(duration),
                width=int(video_stream.get("width", 0)),
                height=int(video_stream.get("height", 0)),
                fps=_parse_frame_rate(video_stream.get("r_frame_rate", "0/1")),
                codec=video_stream.get("codec_name", "unknown"),
                bitrate=int(format_info.get("bit_rate", 0)),
                has_audio=has_audio,
                file_size_bytes=int(format_info.get("size", 0)),
            )
        except (TypeError, ValueError) as e:
            raise MetadataProbeError(str(video_path), f"bad ffprobe field: {e}") from e
