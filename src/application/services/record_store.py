"""Generation-checked writes to video records."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel

from src.application.services.cache_invalidation import CacheInvalidationCoordinator
from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.commons.telemetry import get_logger
from src.domain.exceptions import RunSupersededException, VideoNotFoundException
from src.domain.models.video import ProcessingStatus, VideoRecord

# Retries when another writer bumps the generation between our read and write
_CLAIM_ATTEMPTS = 3


def _serialize(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def to_document_updates(updates: dict[str, Any]) -> dict[str, Any]:
    """Serialize field updates the same way ``model_dump(mode="json")`` would."""
    return {key: _serialize(value) for key, value in updates.items()}


class ProcessingRecordStore:
    """The only path through which a pipeline run mutates a video record.

    Every write is a compare-and-set on ``run_generation``. A write whose
    generation no longer matches raises RunSupersededException. Every
    successful write is followed by cache invalidation before returning.
    """

    def __init__(
        self,
        document_db: DocumentDBBase,
        cache_invalidation: CacheInvalidationCoordinator,
        collection: str = "videos",
    ) -> None:
        self._document_db = document_db
        self._cache = cache_invalidation
        self._collection = collection
        self._logger = get_logger(__name__)

    async def load(self, video_id: str) -> VideoRecord:
        """Fetch a record.

        Raises:
            VideoNotFoundException: If no record has this id.
        """
        return VideoRecord.model_validate(await self._load_document(video_id))

    async def _load_document(self, video_id: str) -> dict[str, Any]:
        doc = await self._document_db.find_by_id(self._collection, video_id)
        if doc is None:
            raise VideoNotFoundException(video_id)
        return doc

    async def claim_run(self, video_id: str) -> tuple[VideoRecord, int]:
        """Take ownership of a record for a new run.

        Bumps the generation, moves the record to ``processing`` at 0% and
        clears any previous result. A later claim always wins over an earlier
        one, so the run holding the older generation stops at its next write.

        Returns:
            The claimed record and the generation the run must write with.
        """
        return await self._bump_generation(video_id, ProcessingStatus.PROCESSING)

    async def reset_for_reprocess(self, video_id: str) -> VideoRecord:
        """Return a record to ``pending`` and invalidate any in-flight run."""
        record, _ = await self._bump_generation(video_id, ProcessingStatus.PENDING)
        return record

    async def write(
        self,
        video_id: str,
        generation: int,
        updates: dict[str, Any],
    ) -> None:
        """Apply updates if ``generation`` still owns the record.

        Raises:
            RunSupersededException: If a newer run or a reset bumped the generation.
        """
        fields = to_document_updates({**updates, "updated_at": datetime.now(UTC)})
        matched = await self._document_db.update_where(
            self._collection,
            video_id,
            {"run_generation": generation},
            fields,
        )
        if not matched:
            raise RunSupersededException(video_id, generation)
        await self._cache.invalidate(video_id)

    async def _bump_generation(
        self,
        video_id: str,
        status: ProcessingStatus,
    ) -> tuple[VideoRecord, int]:
        for _ in range(_CLAIM_ATTEMPTS):
            doc = await self._load_document(video_id)
            record = VideoRecord.model_validate(doc)
            generation = record.run_generation + 1
            updates = {
                "processing_status": status,
                "processing_progress": 0,
                "current_stage": None,
                "sensitivity_result": None,
                "error_message": None,
                "processed_at": None,
                "run_generation": generation,
                "updated_at": datetime.now(UTC),
            }
            matched = await self._document_db.update_where(
                self._collection,
                video_id,
                # Records written by the upload flow have no generation yet; a
                # null expected value matches the missing field
                {"run_generation": doc.get("run_generation")},
                to_document_updates(updates),
            )
            if matched:
                await self._cache.invalidate(video_id)
                return record.model_copy(update=updates), generation

            self._logger.debug(
                "Generation changed during claim, retrying",
                extra={"video_id": video_id, "seen_generation": record.run_generation},
            )

        raise RunSupersededException(video_id, record.run_generation)
