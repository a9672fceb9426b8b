"""Pydantic settings models for application configuration."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "video-sentinel"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class ServerSettings(BaseModel):
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    workers: int = Field(default=1, ge=1, le=32)
    reload: bool = False
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    api_prefix: str = "/v1"
    docs_enabled: bool = True


class BlobStorageSettings(BaseModel):
    """Blob storage settings (MinIO/S3)."""

    provider: Literal["minio", "s3"] = "minio"
    endpoint: str = "localhost:9000"
    access_key: str = ""
    secret_key: str = ""
    use_ssl: bool = False
    region: str = "us-east-1"
    videos_bucket: str = "sentinel-videos"
    scratch_dir: str | None = None


class DocumentCollectionSettings(BaseModel):
    """Document DB collection names."""

    videos: str = "videos"


class DocumentDBSettings(BaseModel):
    """Document database settings (MongoDB)."""

    provider: Literal["mongodb", "memory"] = "mongodb"
    host: str = "localhost"
    port: int = 27017
    username: str = ""
    password: str = ""
    database: str = "video_sentinel"
    auth_source: str = "admin"
    collections: DocumentCollectionSettings = Field(
        default_factory=DocumentCollectionSettings
    )


class CacheSettings(BaseModel):
    """Read-view cache settings (Redis)."""

    provider: Literal["redis", "memory"] = "redis"
    url: str = "redis://localhost:6379/0"
    key_prefix: str = ""
    video_ttl_seconds: int = 600
    stream_ttl_seconds: int = 900
    processing_ttl_seconds: int = 120
    list_ttl_seconds: int = 180
    socket_timeout_seconds: float = 2.0


class RealtimeSettings(BaseModel):
    """Real-time progress channel settings."""

    provider: Literal["websocket", "redis"] = "websocket"
    redis_url: str = "redis://localhost:6379/1"
    channel_prefix: str = "sentinel"
    delivery_timeout_seconds: float = Field(default=2.0, gt=0)
    session_queue_size: int = Field(default=256, ge=1)


class ModerationSettings(BaseModel):
    """External content moderation service settings (Rekognition Video)."""

    provider: Literal["rekognition", "disabled"] = "rekognition"
    region: str = "us-east-1"
    access_key_id: str | None = None
    secret_access_key: str | None = None
    min_confidence: float = Field(default=70.0, ge=0, le=100)
    max_polling_attempts: int = Field(default=60, ge=1)
    polling_interval_seconds: float = Field(default=5.0, ge=0)
    initial_delay_seconds: float = Field(default=2.0, ge=0)
    sns_topic_arn: str | None = None
    role_arn: str | None = None


def _default_keywords() -> list[str]:
    return [
        "violence",
        "violent",
        "explicit",
        "nsfw",
        "adult",
        "danger",
        "harmful",
        "weapon",
        "gore",
        "inappropriate",
        "restricted",
        "mature",
        "18+",
        "xxx",
    ]


class ClassifierSettings(BaseModel):
    """Sensitivity classifier heuristics."""

    keywords: list[str] = Field(default_factory=_default_keywords)
    random_flag_probability: float = Field(default=0.1, ge=0, le=1)
    large_file_threshold_bytes: int = 100 * 1024 * 1024  # 100 MB
    large_file_flag_probability: float = Field(default=0.25, ge=0, le=1)
    flagged_confidence_range: tuple[float, float] = (0.75, 0.95)
    safe_confidence_range: tuple[float, float] = (0.85, 0.99)
    seed: int | None = None


class PipelineSettings(BaseModel):
    """Pipeline stage pacing."""

    validation_steps: int = Field(default=5, ge=1)
    validation_duration_seconds: float = Field(default=1.5, ge=0)
    metadata_step_delay_seconds: float = Field(default=0.5, ge=0)
    simulated_analysis_duration_seconds: float = Field(default=3.0, ge=0)
    simulated_analysis_steps: int = Field(default=5, ge=1)
    fallback_duration_seconds: float = Field(default=2.0, ge=0)
    fallback_steps: int = Field(default=5, ge=1)
    reporting_duration_seconds: float = Field(default=1.0, ge=0)
    reporting_steps: int = Field(default=5, ge=1)


class TelemetrySettings(BaseModel):
    """Telemetry and observability settings."""

    enabled: bool = True
    log_format: Literal["json", "text"] = "json"
    log_level: str = "INFO"


class Settings(BaseSettings):
    """Root settings container with environment loading."""

    app: AppSettings = Field(default_factory=AppSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    blob_storage: BlobStorageSettings = Field(default_factory=BlobStorageSettings)
    document_db: DocumentDBSettings = Field(default_factory=DocumentDBSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    realtime: RealtimeSettings = Field(default_factory=RealtimeSettings)
    moderation: ModerationSettings = Field(default_factory=ModerationSettings)
    classifier: ClassifierSettings = Field(default_factory=ClassifierSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VIDEO_SENTINEL__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
