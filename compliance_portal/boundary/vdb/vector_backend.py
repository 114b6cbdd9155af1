"""
Vector backend contract and in-memory implementation.

The core only needs idempotent upsert, filtered similarity query,
delete-by-id, delete-all and enumeration over a namespace. Any ANN
service can sit behind this protocol.

Dependencies: numpy, compliance_portal.boundary.vdb.vector_schemas
System role: Vector storage strategy interface
"""

import asyncio
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import numpy as np

from compliance_portal.boundary.vdb.vector_schemas import (
    IndexStats,
    MetadataFilter,
    VectorEntry,
    VectorMatch,
    matches_filter,
)


@runtime_checkable
class VectorBackend(Protocol):
    """Minimal vector-search capability set."""

    async def upsert(self, namespace: str, entries: Sequence[VectorEntry]) -> None:
        """Insert or replace entries by id."""
        ...

    async def query(
        self,
        namespace: str,
        vector: Sequence[float],
        top_k: int,
        metadata_filter: MetadataFilter | None = None,
    ) -> list[VectorMatch]:
        """Return up to top_k matches, best first."""
        ...

    async def delete(self, namespace: str, ids: Sequence[str]) -> None:
        """Delete entries by id; unknown ids are ignored."""
        ...

    async def delete_all(self, namespace: str) -> None:
        """Remove every entry in the namespace."""
        ...

    async def list_entries(
        self,
        namespace: str,
        metadata_filter: MetadataFilter | None = None,
    ) -> list[VectorEntry]:
        """Enumerate entries (metadata only is guaranteed) matching the filter."""
        ...

    async def stats(self, namespace: str) -> IndexStats:
        """Entry count and dimension for the namespace."""
        ...


def _cosine(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    query_norm = np.linalg.norm(query)
    row_norms = np.linalg.norm(matrix, axis=1)
    denom = row_norms * query_norm
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = np.where(denom > 0, matrix @ query / denom, 0.0)
    return scores


class InMemoryVectorBackend:
    """
    Process-local vector backend using exact cosine similarity.

    Suitable for tests and single-process development. An asyncio lock
    serializes writes, mirroring how a hosted index serializes
    conflicting writes.
    """

    def __init__(self) -> None:
        self._namespaces: dict[str, dict[str, VectorEntry]] = {}
        self._lock = asyncio.Lock()

    def _space(self, namespace: str) -> dict[str, VectorEntry]:
        return self._namespaces.setdefault(namespace, {})

    async def upsert(self, namespace: str, entries: Sequence[VectorEntry]) -> None:
        async with self._lock:
            space = self._space(namespace)
            for entry in entries:
                space[entry.id] = entry.model_copy(deep=True)

    async def query(
        self,
        namespace: str,
        vector: Sequence[float],
        top_k: int,
        metadata_filter: MetadataFilter | None = None,
    ) -> list[VectorMatch]:
        candidates = [
            entry
            for entry in self._space(namespace).values()
            if matches_filter(entry.metadata, metadata_filter)
        ]
        if not candidates or top_k <= 0:
            return []

        matrix = np.asarray([entry.vector for entry in candidates], dtype=np.float32)
        scores = _cosine(matrix, np.asarray(vector, dtype=np.float32))
        order = np.argsort(-scores, kind="stable")[:top_k]
        return [
            VectorMatch(
                id=candidates[i].id,
                score=float(scores[i]),
                metadata=dict(candidates[i].metadata),
            )
            for i in order
        ]

    async def delete(self, namespace: str, ids: Sequence[str]) -> None:
        async with self._lock:
            space = self._space(namespace)
            for vector_id in ids:
                space.pop(vector_id, None)

    async def delete_all(self, namespace: str) -> None:
        async with self._lock:
            self._namespaces.pop(namespace, None)

    async def list_entries(
        self,
        namespace: str,
        metadata_filter: MetadataFilter | None = None,
    ) -> list[VectorEntry]:
        return [
            entry.model_copy(deep=True)
            for entry in self._space(namespace).values()
            if matches_filter(entry.metadata, metadata_filter)
        ]

    async def stats(self, namespace: str) -> IndexStats:
        space = self._space(namespace)
        dimension = len(next(iter(space.values())).vector) if space else None
        return IndexStats(namespace=namespace, total_vectors=len(space), dimension=dimension)
