"""
Chunk indexing task.

Embeds and upserts chunks a few at a time. A chunk that still fails after
the client's retries is logged and skipped; the rest of the document keeps
going. Progress is reported from a processed counter that only increases.

Dependencies: asyncio, compliance_portal.boundary.vdb
System role: Final stage of document ingestion pipeline
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from pydantic import BaseModel, Field

from compliance_portal.boundary.vdb.vector_schemas import ChunkMetadata
from compliance_portal.boundary.vdb.vector_store_client import VectorStoreClient
from compliance_portal.core.document_processing.models import EnhancedChunk
from compliance_portal.core.exceptions import CompliancePortalException

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], Awaitable[None]]


class DocumentFields(BaseModel):
    """Document attributes copied onto every chunk vector."""

    title: str = ""
    state: str | None = None
    document_types: list[str] = Field(default_factory=list)
    verticals: list[str] = Field(default_factory=list)


class IndexingOutcome(BaseModel):
    """Result of indexing one document's chunks."""

    processed: int = 0
    failed_chunk_indexes: list[int] = Field(default_factory=list)
    vector_ids: list[str] = Field(default_factory=list)


def build_chunk_metadata(
    document_id: str,
    chunk: EnhancedChunk,
    fields: DocumentFields,
) -> ChunkMetadata:
    return ChunkMetadata(
        document_id=document_id,
        chunk_index=chunk.chunk_index,
        page_number=chunk.page_number,
        section_title=chunk.section_title,
        original_start_char=chunk.original_start_char,
        original_end_char=chunk.original_end_char,
        title=fields.title,
        state=fields.state,
        document_types=fields.document_types,
        verticals=fields.verticals,
        chunk_text=chunk.text,
        context_before=chunk.context_before,
        context_after=chunk.context_after,
    )


class IndexingTask:
    """Embed and upsert chunks with bounded concurrency."""

    def __init__(
        self,
        vector_client: VectorStoreClient,
        concurrency: int = 4,
        progress_batch_size: int = 10,
    ) -> None:
        """
        Initialize indexing task.

        Args:
            vector_client: Embedding + vector facade
            concurrency: Chunks in flight at once
            progress_batch_size: Report progress after this many successes
        """
        self._client = vector_client
        self._concurrency = max(1, concurrency)
        self._batch = max(1, progress_batch_size)

    async def index(
        self,
        document_id: str,
        chunks: Sequence[EnhancedChunk],
        fields: DocumentFields,
        on_progress: ProgressCallback | None = None,
    ) -> IndexingOutcome:
        """
        Index all chunks of one document.

        Args:
            document_id: Owning document ID
            chunks: Chunks to embed and upsert
            fields: Document attributes stored in chunk metadata
            on_progress: Awaited with the processed count every
                ``progress_batch_size`` successes and once at the end

        Returns:
            IndexingOutcome: Processed count, failed indexes and vector ids
        """
        semaphore = asyncio.Semaphore(self._concurrency)
        counter_lock = asyncio.Lock()
        outcome = IndexingOutcome()

        async def index_one(chunk: EnhancedChunk) -> None:
            async with semaphore:
                try:
                    vector_id = await self._client.upsert_chunk(
                        document_id,
                        chunk,
                        build_chunk_metadata(document_id, chunk, fields),
                    )
                except CompliancePortalException as e:
                    logger.warning(
                        f"{__name__}:index - Chunk {chunk.chunk_index} skipped: {e.message}",
                        extra={"document_id": document_id, "chunk_index": chunk.chunk_index},
                    )
                    async with counter_lock:
                        outcome.failed_chunk_indexes.append(chunk.chunk_index)
                    return

            # Progress writes happen under the lock so they land in order
            async with counter_lock:
                outcome.processed += 1
                outcome.vector_ids.append(vector_id)
                if on_progress and outcome.processed % self._batch == 0:
                    await on_progress(outcome.processed)

        await asyncio.gather(*(index_one(chunk) for chunk in chunks))

        if on_progress and outcome.processed and outcome.processed % self._batch != 0:
            await on_progress(outcome.processed)

        outcome.failed_chunk_indexes.sort()
        logger.info(
            f"{__name__}:index - SUCCESS",
            extra={
                "document_id": document_id,
                "total": len(chunks),
                "processed": outcome.processed,
                "failed": len(outcome.failed_chunk_indexes),
            },
        )
        return outcome
