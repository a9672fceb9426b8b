"""In-memory document database for tests and single-process development."""

import asyncio
import copy
import time
from collections import defaultdict
from typing import Any
from uuid import uuid4

from src.commons.infrastructure.blob.base import HealthStatus
from src.commons.infrastructure.documentdb.base import DocumentDBBase


def _matches(document: dict[str, Any], filters: dict[str, Any]) -> bool:
    return all(document.get(key) == value for key, value in filters.items())


class InMemoryDocumentDB(DocumentDBBase):
    """Dict-backed document store.

    Documents are deep-copied on the way in and out, so callers never share
    mutable state with the store. A single lock makes ``update_where``
    atomic with respect to other writers on the same loop.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self._lock = asyncio.Lock()

    async def insert(self, collection: str, document: dict[str, Any]) -> str:
        doc = copy.deepcopy(document)
        doc_id = str(doc.setdefault("id", str(uuid4())))
        async with self._lock:
            self._collections[collection][doc_id] = doc
        return doc_id

    async def find_by_id(
        self,
        collection: str,
        document_id: str,
    ) -> dict[str, Any] | None:
        doc = self._collections[collection].get(document_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        docs = [
            doc
            for doc in self._collections[collection].values()
            if _matches(doc, filters)
        ]
        # Apply sort keys last-to-first so the first key dominates
        for field, direction in reversed(sort or []):
            docs.sort(key=lambda d: d.get(field) or "", reverse=direction < 0)
        return [copy.deepcopy(doc) for doc in docs[skip : skip + limit]]

    async def update(
        self,
        collection: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> bool:
        return await self.update_where(collection, document_id, {}, updates)

    async def update_where(
        self,
        collection: str,
        document_id: str,
        expected: dict[str, Any],
        updates: dict[str, Any],
    ) -> bool:
        async with self._lock:
            doc = self._collections[collection].get(document_id)
            if doc is None or not _matches(doc, expected):
                return False
            doc.update(copy.deepcopy(updates))
            return True

    async def delete(self, collection: str, document_id: str) -> bool:
        async with self._lock:
            return self._collections[collection].pop(document_id, None) is not None

    async def health_check(self) -> HealthStatus:
        start = time.perf_counter()
        total = sum(len(docs) for docs in self._collections.values())
        return HealthStatus(
            healthy=True,
            latency_ms=(time.perf_counter() - start) * 1000,
            message="In-memory document store",
            details={"documents": str(total)},
        )
