"""Domain value objects."""

from src.domain.value_objects.storage_location import (
    LocalStorage,
    RemoteStorage,
    StorageLocation,
)

__all__ = [
    "LocalStorage",
    "RemoteStorage",
    "StorageLocation",
]
