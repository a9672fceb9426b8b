"""Best-effort extraction of duration and resolution for a stored video."""

import random
import tempfile
from pathlib import Path, PurePosixPath

from src.application.dtos.processing import ProbeResult
from src.commons.infrastructure.blob.base import BlobStorageBase
from src.commons.telemetry import get_logger, timed
from src.domain.models.video import Resolution
from src.domain.value_objects.storage_location import (
    RemoteStorage,
    StorageLocation,
)
from src.infrastructure.video.base import VideoInspectorBase

PLACEHOLDER_DURATION_RANGE = (30, 629)
PLACEHOLDER_RESOLUTIONS = (
    Resolution(width=1280, height=720),
    Resolution(width=1920, height=1080),
    Resolution(width=3840, height=2160),
)


class MetadataProbe:
    """Reads duration and resolution, never failing the pipeline.

    Local assets are inspected in place. Remote assets are first copied to a
    scratch directory that is removed on every exit path. Any failure yields
    plausible placeholder values marked ``estimated``.
    """

    def __init__(
        self,
        inspector: VideoInspectorBase,
        blob_storage: BlobStorageBase | None = None,
        *,
        scratch_dir: str | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._inspector = inspector
        self._blob = blob_storage
        self._scratch_dir = scratch_dir
        self._rng = rng or random.Random()
        self._logger = get_logger(__name__)

    @timed(threshold_ms=1000)
    async def probe(self, storage: StorageLocation) -> ProbeResult:
        try:
            if isinstance(storage, RemoteStorage):
                return await self._probe_remote(storage)
            return await self._probe_file(Path(storage.path))
        except Exception as e:
            self._logger.warning(
                "Metadata probe failed, using estimated values",
                extra={"uri": storage.uri, "error": str(e)},
            )
            return self.placeholder()

    def placeholder(self) -> ProbeResult:
        """Randomized but plausible metadata flagged as estimated."""
        low, high = PLACEHOLDER_DURATION_RANGE
        return ProbeResult(
            duration_seconds=float(self._rng.randint(low, high)),
            resolution=self._rng.choice(PLACEHOLDER_RESOLUTIONS),
            estimated=True,
        )

    async def _probe_remote(self, storage: RemoteStorage) -> ProbeResult:
        if self._blob is None:
            raise RuntimeError("No blob storage configured for remote assets")

        suffix = PurePosixPath(storage.key).suffix or ".mp4"
        with tempfile.TemporaryDirectory(
            dir=self._scratch_dir,
            prefix="sentinel-probe-",
        ) as tmp:
            local_path = Path(tmp) / f"asset{suffix}"
            size = await self._blob.download_to_file(
                storage.bucket,
                storage.key,
                local_path,
            )
            self._logger.debug(
                "Downloaded asset for probing",
                extra={"uri": storage.uri, "bytes": size},
            )
            return await self._probe_file(local_path)

    async def _probe_file(self, path: Path) -> ProbeResult:
        info = await self._inspector.get_video_info(path)

        resolution = None
        if info.width > 0 and info.height > 0:
            resolution = Resolution(width=info.width, height=info.height)

        return ProbeResult(
            duration_seconds=float(round(info.duration_seconds)),
            resolution=resolution,
            estimated=False,
        )

