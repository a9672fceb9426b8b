"""Unit tests for the ffprobe video inspector."""

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from src.domain.exceptions import MetadataProbeError
from src.infrastructure.video.ffprobe_inspector import (
    FFprobeInspector,
    _parse_frame_rate,
)

FFPROBE_OUTPUT = {
    "streams": [
        {
            "codec_type": "video",
            "codec_name": "h264",
            "width": 1920,
            "height": 1080,
            "r_frame_rate": "30000/1001",
        },
        {"codec_type": "audio", "codec_name": "aac"},
    ],
    "format": {"duration": "125.400000", "bit_rate": "4000000", "size": "62700000"},
}


def _completed(stdout: dict) -> MagicMock:
    return MagicMock(stdout=json.dumps(stdout).encode())


class TestParseFrameRate:
    """Tests for _parse_frame_rate."""

    def test_fraction(self):
        assert _parse_frame_rate("30000/1001") == pytest.approx(29.97, rel=1e-3)

    def test_zero_denominator(self):
        assert _parse_frame_rate("0/0") == 0.0

    def test_plain_number(self):
        assert _parse_frame_rate("25") == 25.0


class TestFFprobeInspector:
    """Tests for FFprobeInspector with subprocess patched."""

    @pytest.fixture
    def run(self):
        with patch(
            "src.infrastructure.video.ffprobe_inspector.subprocess.run"
        ) as mock_run:
            yield mock_run

    async def test_parses_video_info(self, run):
        run.return_value = _completed(FFPROBE_OUTPUT)

        info = await FFprobeInspector().get_video_info(Path("/tmp/a.mp4"))

        assert info.duration_seconds == 125.4
        assert (info.width, info.height) == (1920, 1080)
        assert info.codec == "h264"
        assert info.has_audio is True
        assert info.file_size_bytes == 62_700_000
        assert run.call_args.args[0][-1] == "/tmp/a.mp4"

    async def test_stream_duration_fallback(self, run):
        output = {
            "streams": [
                {
                    "codec_type": "video",
                    "width": 640,
                    "height": 360,
                    "duration": "12.5",
                }
            ],
            "format": {},
        }
        run.return_value = _completed(output)

        info = await FFprobeInspector().get_video_info(Path("/tmp/a.webm"))

        assert info.duration_seconds == 12.5

    async def test_no_video_stream(self, run):
        run.return_value = _completed({"streams": [{"codec_type": "audio"}]})

        with pytest.raises(MetadataProbeError, match="no video stream"):
            await FFprobeInspector().get_video_info(Path("/tmp/a.mp3"))

    @pytest.mark.parametrize(
        ("error", "reason"),
        [
            (FileNotFoundError(), "not installed"),
            (subprocess.CalledProcessError(1, "ffprobe"), "exited with 1"),
            (subprocess.TimeoutExpired("ffprobe", 60), "timed out"),
        ],
    )
    async def test_subprocess_errors(self, run, error, reason):
        run.side_effect = error

        with pytest.raises(MetadataProbeError, match=reason):
            await FFprobeInspector().get_video_info(Path("/tmp/a.mp4"))

    async def test_unreadable_output(self, run):
        run.return_value = MagicMock(stdout=b"not json")

        with pytest.raises(MetadataProbeError, match="unreadable"):
            await FFprobeInspector().get_video_info(Path("/tmp/a.mp4"))
