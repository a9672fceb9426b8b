"""Sensitivity processing endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from src.api.dependencies import CacheDep, RecordStoreDep, SchedulerDep, SettingsDep
from src.application.dtos.processing import ProcessingStateResponse, StartRunResponse
from src.application.services.cache_invalidation import video_key
from src.commons.telemetry import get_logger
from src.domain.models.video import VideoRecord

router = APIRouter()
logger = get_logger(__name__)


@router.post(
    "/videos/{video_id}/process",
    response_model=StartRunResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start processing",
    description=(
        "Start sensitivity analysis in the background. Progress is pushed to "
        "the owner's real-time sessions and persisted on the video record."
    ),
)
async def start_processing(
    video_id: str,
    scheduler: SchedulerDep,
    owner_id: Annotated[
        str | None,
        Query(description="User to notify, defaults to the owner"),
    ] = None,
) -> StartRunResponse:
    """Schedule a pipeline run for a video."""
    await scheduler.start_run(video_id, owner_id)
    return StartRunResponse(video_id=video_id, message="Processing started")


@router.post(
    "/videos/{video_id}/reprocess",
    response_model=StartRunResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Reprocess video",
    description="Clear the previous result and run the analysis again.",
)
async def reprocess_video(
    video_id: str,
    scheduler: SchedulerDep,
    owner_id: Annotated[
        str | None,
        Query(description="User to notify, defaults to the owner"),
    ] = None,
) -> StartRunResponse:
    """Reset a video and schedule a fresh run."""
    await scheduler.reprocess(video_id, owner_id)
    return StartRunResponse(video_id=video_id, message="Reprocessing started")


@router.get(
    "/videos/{video_id}/processing",
    response_model=ProcessingStateResponse,
    response_model_by_alias=True,
    summary="Get processing state",
    description=(
        "Current status, progress, stage and result. Clients that missed "
        "real-time events rebuild their view from this endpoint."
    ),
)
async def get_processing_state(
    video_id: str,
    records: RecordStoreDep,
    cache: CacheDep,
    settings: SettingsDep,
) -> ProcessingStateResponse:
    """Read-through the full-record cache view."""
    key = video_key(video_id)
    cached = await cache.get(key)
    if cached is not None:
        logger.debug("Cache hit", extra={"key": key})
        return ProcessingStateResponse.from_record(VideoRecord.model_validate(cached))

    record = await records.load(video_id)
    ttl = (
        settings.cache.video_ttl_seconds
        if record.is_terminal
        else settings.cache.processing_ttl_seconds
    )
    await cache.set(key, record.model_dump(mode="json"), ttl)

    # A write landing between the load and the set invalidated before our
    # entry existed; re-read so such an entry never outlives the write
    current = await records.load(video_id)
    if current != record:
        logger.debug("Record changed during read-through", extra={"key": key})
        await cache.delete(key)
        record = current
    return ProcessingStateResponse.from_record(record)
