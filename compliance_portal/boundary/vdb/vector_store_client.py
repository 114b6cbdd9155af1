"""
Vector store client.

High-level facade over an Embeddings provider and a VectorBackend. Owns the
namespace, batches deletes, retries transient failures with tenacity and
wraps exhausted failures in typed exceptions.

Dependencies: langchain_core, tenacity, compliance_portal.core
System role: Single entry point for embedding and vector operations
"""

import logging
from collections.abc import Sequence

from langchain_core.embeddings import Embeddings

from compliance_portal.boundary.vdb.vector_backend import VectorBackend
from compliance_portal.boundary.vdb.vector_schemas import (
    ChunkMetadata,
    IndexStats,
    MetadataFilter,
    VectorEntry,
    VectorMatch,
)
from compliance_portal.configs.vector_store import RetrySettings
from compliance_portal.core.document_processing.models import EnhancedChunk, vector_id
from compliance_portal.core.exceptions import EmbeddingError, VectorStoreError
from compliance_portal.core.retrying import build_async_retrying

logger = logging.getLogger(__name__)


class VectorStoreClient:
    """
    Embedding and vector operations for one namespace.

    All backend calls go through the same retry policy; errors surface as
    EmbeddingError or VectorStoreError once attempts are exhausted.
    """

    def __init__(
        self,
        embeddings: Embeddings,
        backend: VectorBackend,
        namespace: str,
        retry_settings: RetrySettings | None = None,
        batch_size: int = 100,
    ) -> None:
        """
        Initialize client.

        Args:
            embeddings: LangChain embeddings provider
            backend: Vector backend implementation
            namespace: Logical partition for every operation
            retry_settings: Backoff policy (defaults from environment if None)
            batch_size: Maximum ids per delete call
        """
        self.embeddings = embeddings
        self.backend = backend
        self.namespace = namespace
        self.retry_settings = retry_settings or RetrySettings()
        self.batch_size = max(1, batch_size)

    async def embed(self, text: str) -> list[float]:
        """
        Embed a chunk of document text.

        Raises:
            EmbeddingError: Provider failed after retries
        """
        try:
            async for attempt in build_async_retrying(self.retry_settings, logger, "embed"):
                with attempt:
                    return await self.embeddings.aembed_query(text)
        except Exception as e:
            logger.error(f"{__name__}:embed - FAILED: {type(e).__name__}: {e}")
            raise EmbeddingError(
                f"Embedding failed: {e}",
                details={"text_length": len(text)},
            ) from e

    async def embed_query(self, query: str) -> list[float]:
        """Embed a search query (same model and dimension as documents)."""
        return await self.embed(query)

    async def _call(self, operation: str, func, *args, **kwargs):
        try:
            async for attempt in build_async_retrying(self.retry_settings, logger, operation):
                with attempt:
                    return await func(*args, **kwargs)
        except Exception as e:
            logger.error(f"{__name__}:{operation} - FAILED: {type(e).__name__}: {e}")
            raise VectorStoreError(
                f"Vector store {operation} failed: {e}",
                operation=operation,
                details={"namespace": self.namespace},
            ) from e

    async def upsert_chunk(
        self,
        document_id: str,
        chunk: EnhancedChunk,
        metadata: ChunkMetadata,
    ) -> str:
        """
        Embed one chunk and upsert it under its deterministic id.

        Args:
            document_id: Owning document ID
            chunk: Chunk to index
            metadata: Metadata stored with the vector

        Returns:
            str: Vector id ``{document_id}_chunk_{chunk_index}``

        Raises:
            EmbeddingError: Embedding failed after retries
            VectorStoreError: Upsert failed after retries
        """
        entry_id = vector_id(document_id, chunk.chunk_index)
        vector = await self.embed(chunk.text)
        entry = VectorEntry(id=entry_id, vector=vector, metadata=metadata.to_wire())
        await self._call("upsert", self.backend.upsert, self.namespace, [entry])
        return entry_id

    async def search(
        self,
        vector: Sequence[float],
        top_k: int,
        metadata_filter: MetadataFilter | None = None,
    ) -> list[VectorMatch]:
        """Similarity query, best match first."""
        matches = await self._call(
            "query", self.backend.query, self.namespace, list(vector), top_k, metadata_filter
        )
        logger.info(
            f"{__name__}:search - SUCCESS",
            extra={"top_k": top_k, "filter": metadata_filter, "matches": len(matches)},
        )
        return matches

    async def delete_ids(self, ids: Sequence[str]) -> int:
        """
        Delete vectors by id in bounded batches.

        Returns:
            int: Number of ids submitted for deletion
        """
        ids = list(ids)
        for offset in range(0, len(ids), self.batch_size):
            batch = ids[offset:offset + self.batch_size]
            await self._call("delete", self.backend.delete, self.namespace, batch)
        return len(ids)

    async def delete_document(self, document_id: str) -> int:
        """
        Delete every vector whose documentId equals ``document_id`` exactly.

        Returns:
            int: Number of vectors deleted
        """
        entries = await self.list_entries({"documentId": {"$eq": document_id}})
        deleted = await self.delete_ids([entry.id for entry in entries])
        logger.info(
            f"{__name__}:delete_document - SUCCESS",
            extra={"document_id": document_id, "deleted": deleted},
        )
        return deleted

    async def delete_all(self) -> None:
        logger.warning(f"{__name__}:delete_all - Clearing namespace={self.namespace}")
        await self._call("delete_all", self.backend.delete_all, self.namespace)

    async def list_entries(self, metadata_filter: MetadataFilter | None = None) -> list[VectorEntry]:
        return await self._call(
            "list_entries", self.backend.list_entries, self.namespace, metadata_filter
        )

    async def get_index_stats(self) -> IndexStats:
        return await self._call("stats", self.backend.stats, self.namespace)
