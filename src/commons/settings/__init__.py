"""Settings management module."""

from src.commons.settings.loader import SettingsLoader, get_settings, reset_settings
from src.commons.settings.models import (
    AppSettings,
    BlobStorageSettings,
    CacheSettings,
    ClassifierSettings,
    DocumentCollectionSettings,
    DocumentDBSettings,
    ModerationSettings,
    PipelineSettings,
    RealtimeSettings,
    ServerSettings,
    Settings,
    TelemetrySettings,
)

__all__ = [
    # Loader
    "SettingsLoader",
    "get_settings",
    "reset_settings",
    # Main settings
    "Settings",
    "AppSettings",
    "ServerSettings",
    # Storage
    "BlobStorageSettings",
    "DocumentDBSettings",
    "DocumentCollectionSettings",
    "CacheSettings",
    # Delivery
    "RealtimeSettings",
    # Analysis
    "ModerationSettings",
    "ClassifierSettings",
    "PipelineSettings",
    # Telemetry
    "TelemetrySettings",
]
