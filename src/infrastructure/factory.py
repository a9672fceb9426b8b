"""Infrastructure factory for creating service instances from configuration."""

from typing import Any, cast

from src.commons.infrastructure.blob import BlobStorageBase, MinioBlobStorage
from src.commons.infrastructure.cache import CacheBase, InMemoryCache, RedisCache
from src.commons.infrastructure.documentdb import (
    DocumentDBBase,
    InMemoryDocumentDB,
    MongoDBDocumentDB,
)
from src.commons.infrastructure.realtime import (
    RealtimeChannelBase,
    RedisPubSubChannel,
    SessionHub,
)
from src.commons.settings.models import Settings
from src.commons.telemetry import get_logger
from src.infrastructure.moderation import (
    ModerationServiceBase,
    RekognitionModerationService,
)
from src.infrastructure.video import FFprobeInspector, VideoInspectorBase

logger = get_logger(__name__)


class InfrastructureFactory:
    """Factory for creating infrastructure service instances.

    Creates concrete implementations based on configuration settings. Each
    instance is built on first use and then shared, so the whole process talks
    to one real-time channel, one cache client and one database client.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._instances: dict[str, Any] = {}

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_blob_storage(self) -> BlobStorageBase:
        """Get blob storage instance.

        Returns:
            Configured blob storage provider.
        """
        if "blob_storage" not in self._instances:
            blob_settings = self._settings.blob_storage
            self._instances["blob_storage"] = MinioBlobStorage(
                endpoint=blob_settings.endpoint,
                access_key=blob_settings.access_key,
                secret_key=blob_settings.secret_key,
                secure=blob_settings.use_ssl,
                region=blob_settings.region,
            )
        return cast("BlobStorageBase", self._instances["blob_storage"])

    def get_document_db(self) -> DocumentDBBase:
        """Get document database instance.

        Returns:
            Configured document database provider.
        """
        if "document_db" not in self._instances:
            doc_settings = self._settings.document_db
            if doc_settings.provider == "memory":
                self._instances["document_db"] = InMemoryDocumentDB()
                return cast("DocumentDBBase", self._instances["document_db"])

            if doc_settings.username and doc_settings.password:
                connection_string = (
                    f"mongodb://{doc_settings.username}:{doc_settings.password}"
                    f"@{doc_settings.host}:{doc_settings.port}"
                    f"/?authSource={doc_settings.auth_source}"
                )
            else:
                connection_string = f"mongodb://{doc_settings.host}:{doc_settings.port}"
            self._instances["document_db"] = MongoDBDocumentDB(
                connection_string=connection_string,
                database_name=doc_settings.database,
            )
        return cast("DocumentDBBase", self._instances["document_db"])

    def get_cache(self) -> CacheBase:
        """Get read-view cache instance.

        Returns:
            Configured cache provider.
        """
        if "cache" not in self._instances:
            cache_settings = self._settings.cache
            if cache_settings.provider == "memory":
                self._instances["cache"] = InMemoryCache()
            else:
                self._instances["cache"] = RedisCache(
                    cache_settings.url,
                    key_prefix=cache_settings.key_prefix,
                    socket_timeout=cache_settings.socket_timeout_seconds,
                )
        return cast("CacheBase", self._instances["cache"])

    def get_realtime_channel(self) -> RealtimeChannelBase:
        """Get the process-wide real-time channel.

        Returns:
            Configured real-time channel.
        """
        if "realtime" not in self._instances:
            rt_settings = self._settings.realtime
            if rt_settings.provider == "redis":
                self._instances["realtime"] = RedisPubSubChannel(
                    rt_settings.redis_url,
                    channel_prefix=rt_settings.channel_prefix,
                )
            else:
                self._instances["realtime"] = SessionHub(
                    queue_size=rt_settings.session_queue_size
                )
        return cast("RealtimeChannelBase", self._instances["realtime"])

    def get_moderation_service(self) -> ModerationServiceBase | None:
        """Get the external moderation service.

        Returns:
            Configured moderation service, or None when moderation is disabled.
        """
        mod_settings = self._settings.moderation
        if mod_settings.provider == "disabled":
            return None

        if "moderation" not in self._instances:
            self._instances["moderation"] = RekognitionModerationService(
                region=mod_settings.region,
                min_confidence=mod_settings.min_confidence,
                sns_topic_arn=mod_settings.sns_topic_arn,
                role_arn=mod_settings.role_arn,
                access_key_id=mod_settings.access_key_id,
                secret_access_key=mod_settings.secret_access_key,
            )
        return cast("ModerationServiceBase", self._instances["moderation"])

    def get_video_inspector(self) -> VideoInspectorBase:
        """Get video inspector instance.

        Returns:
            Configured video inspector.
        """
        if "video_inspector" not in self._instances:
            self._instances["video_inspector"] = FFprobeInspector()
        return cast("VideoInspectorBase", self._instances["video_inspector"])

    async def close_all(self) -> None:
        """Close all service connections."""
        for name, instance in self._instances.items():
            close = getattr(instance, "close", None)
            if close is None:
                continue
            # One failing client must not keep the others open
            try:
                result = close()
                if hasattr(result, "__await__"):
                    await result
            except Exception as e:
                logger.warning(
                    "Failed to close infrastructure client",
                    extra={"client": name, "error": str(e)},
                )
            else:
                logger.debug("Closed infrastructure client", extra={"client": name})

        self._instances.clear()


class _FactoryHolder:
    """Holder for the factory singleton to avoid global statements."""

    instance: InfrastructureFactory | None = None


def get_factory(settings: Settings | None = None) -> InfrastructureFactory:
    """Get or create the infrastructure factory singleton.

    Args:
        settings: Settings to use. Required on first call.

    Returns:
        Infrastructure factory instance.

    Raises:
        ValueError: If settings not provided on first call.
    """
    if _FactoryHolder.instance is None:
        if settings is None:
            raise ValueError("Settings required to initialize factory")
        _FactoryHolder.instance = InfrastructureFactory(settings)

    return _FactoryHolder.instance


def reset_factory() -> None:
    """Reset the factory singleton (for testing)."""
    _FactoryHolder.instance = None
