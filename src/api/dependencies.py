"""FastAPI dependency injection for services and settings."""

import random
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from src.application.services.cache_invalidation import CacheInvalidationCoordinator
from src.application.services.metadata_probe import MetadataProbe
from src.application.services.moderation_client import ModerationClient
from src.application.services.pipeline import PipelineOrchestrator
from src.application.services.progress_notifier import ProgressNotifier
from src.application.services.record_store import ProcessingRecordStore
from src.application.services.run_scheduler import PipelineRunScheduler
from src.application.services.sensitivity_classifier import SensitivityClassifier
from src.commons.infrastructure.cache.base import CacheBase
from src.commons.infrastructure.realtime.base import RealtimeChannelBase
from src.commons.settings.loader import get_settings as _load_settings
from src.commons.settings.models import Settings
from src.commons.telemetry import log_exceptions
from src.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Application settings loaded from config files and environment.
    """
    return _load_settings()


def get_infrastructure_factory(
    settings: Annotated[Settings, Depends(get_settings)],
) -> InfrastructureFactory:
    """Get infrastructure factory with all providers.

    Args:
        settings: Application settings.

    Returns:
        Configured infrastructure factory.
    """
    return get_factory(settings)


@dataclass
class PipelineServices:
    """Process-wide pipeline services sharing one set of clients."""

    record_store: ProcessingRecordStore
    cache_invalidation: CacheInvalidationCoordinator
    orchestrator: PipelineOrchestrator
    scheduler: PipelineRunScheduler


def build_pipeline_services(factory: InfrastructureFactory) -> PipelineServices:
    """Wire the pipeline from infrastructure providers.

    Args:
        factory: Infrastructure factory.

    Returns:
        Pipeline services ready to schedule runs.
    """
    settings = factory.settings

    cache_invalidation = CacheInvalidationCoordinator(factory.get_cache())
    record_store = ProcessingRecordStore(
        document_db=factory.get_document_db(),
        cache_invalidation=cache_invalidation,
        collection=settings.document_db.collections.videos,
    )
    notifier = ProgressNotifier(
        channel=factory.get_realtime_channel(),
        record_store=record_store,
        delivery_timeout_seconds=settings.realtime.delivery_timeout_seconds,
    )
    moderation_service = factory.get_moderation_service()
    moderation_client = (
        ModerationClient(moderation_service, settings.moderation)
        if moderation_service is not None
        else None
    )
    rng = random.Random(settings.classifier.seed)

    orchestrator = PipelineOrchestrator(
        record_store=record_store,
        notifier=notifier,
        cache_invalidation=cache_invalidation,
        metadata_probe=MetadataProbe(
            factory.get_video_inspector(),
            factory.get_blob_storage(),
            scratch_dir=settings.blob_storage.scratch_dir,
            rng=rng,
        ),
        classifier=SensitivityClassifier(settings.classifier, rng),
        settings=settings.pipeline,
        moderation_client=moderation_client,
    )
    return PipelineServices(
        record_store=record_store,
        cache_invalidation=cache_invalidation,
        orchestrator=orchestrator,
        scheduler=PipelineRunScheduler(orchestrator, record_store),
    )


class _ServicesHolder:
    """Holder for the pipeline services singleton."""

    instance: PipelineServices | None = None


def get_pipeline_services(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
) -> PipelineServices:
    """Get the pipeline services, building them on first use.

    Args:
        factory: Infrastructure factory.

    Returns:
        Shared pipeline services.
    """
    if _ServicesHolder.instance is None:
        _ServicesHolder.instance = build_pipeline_services(factory)
    return _ServicesHolder.instance


def get_run_scheduler(
    services: Annotated[PipelineServices, Depends(get_pipeline_services)],
) -> PipelineRunScheduler:
    return services.scheduler


def get_record_store(
    services: Annotated[PipelineServices, Depends(get_pipeline_services)],
) -> ProcessingRecordStore:
    return services.record_store


def get_cache(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
) -> CacheBase:
    return factory.get_cache()


def get_realtime_channel(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
) -> RealtimeChannelBase:
    return factory.get_realtime_channel()


# Type aliases for cleaner route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]
FactoryDep = Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)]
SchedulerDep = Annotated[PipelineRunScheduler, Depends(get_run_scheduler)]
RecordStoreDep = Annotated[ProcessingRecordStore, Depends(get_record_store)]
CacheDep = Annotated[CacheBase, Depends(get_cache)]
RealtimeChannelDep = Annotated[RealtimeChannelBase, Depends(get_realtime_channel)]


@log_exceptions(message="Service initialization failed")
async def init_services(settings: Settings) -> None:
    """Initialize all infrastructure services on startup.

    Args:
        settings: Application settings.
    """
    factory = get_factory(settings)

    # Pre-initialize critical services to fail fast
    factory.get_document_db()
    factory.get_cache()
    factory.get_realtime_channel()
    get_pipeline_services(factory)


async def shutdown_services() -> None:
    """Cancel outstanding runs and shut down infrastructure services."""
    try:
        if _ServicesHolder.instance is not None:
            await _ServicesHolder.instance.scheduler.shutdown()
        factory = get_factory()
        await factory.close_all()
    except ValueError:
        pass  # Factory not initialized
    finally:
        _ServicesHolder.instance = None
        reset_factory()
        get_settings.cache_clear()
