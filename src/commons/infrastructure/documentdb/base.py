"""Abstract base class for document database operations."""

from abc import ABC, abstractmethod
from typing import Any

from src.commons.infrastructure.blob.base import HealthStatus


class DocumentDBBase(ABC):
    """Abstract base class for document database operations.

    Documents are plain dicts keyed by an ``id`` field. Implementations:
    - MongoDB (production)
    - In-memory (tests, single-process development)
    """

    @abstractmethod
    async def insert(
        self,
        collection: str,
        document: dict[str, Any],
    ) -> str:
        """Insert a document.

        Args:
            collection: Collection/table name.
            document: Document to insert.

        Returns:
            Document ID.
        """

    @abstractmethod
    async def find_by_id(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        """Find a document by ID.

        Args:
            collection: Collection/table name.
            document_id: Document ID to find.

        Returns:
            Document if found, None otherwise.
        """

    @abstractmethod
    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        """Find documents matching equality filters.

        Args:
            collection: Collection/table name.
            filters: Field equality filters.
            skip: Number of documents to skip.
            limit: Maximum documents to return.
            sort: Sort specification [(field, direction)].
                  Direction: 1 for ascending, -1 for descending.

        Returns:
            List of matching documents.
        """

    @abstractmethod
    async def update(
        self,
        collection: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> bool:
        """Update a document.

        Args:
            collection: Collection/table name.
            document_id: Document ID to update.
            updates: Fields to set.

        Returns:
            True if updated, False if not found.
        """

    @abstractmethod
    async def update_where(
        self,
        collection: str,
        document_id: str,
        expected: dict[str, Any],
        updates: dict[str, Any],
    ) -> bool:
        """Atomically update a document only if its fields match ``expected``.

        This is a single-document compare-and-set. It is what lets a pipeline
        run detect that a newer run has claimed the same record.

        Args:
            collection: Collection/table name.
            document_id: Document ID to update.
            expected: Field values that must currently hold. ``None`` also
                matches a field the document does not have.
            updates: Fields to set.

        Returns:
            True if the document matched and was updated, False otherwise.
        """

    @abstractmethod
    async def delete(
        self,
        collection: str,
        document_id: str,
    ) -> bool:
        """Delete a document.

        Args:
            collection: Collection/table name.
            document_id: Document ID to delete.

        Returns:
            True if deleted, False if not found.
        """

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health.

        Returns:
            Health status with latency info.
        """

    async def close(self) -> None:  # noqa: B027
        """Release client resources. No-op by default."""
