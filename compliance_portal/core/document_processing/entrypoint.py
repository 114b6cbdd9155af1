"""
Document ingestion pipeline orchestrator.

Drives one document through extraction, chunking and indexing, persisting
status and progress after each stage:

    UPLOADED(0) → EXTRACTING(10) → CHUNKING(30) → EMBEDDING(60..99) → COMPLETED(100)

Any stage failure moves the document to FAILED with a readable message.
Partial indexing completes; zero indexed chunks out of a non-empty set fails.

Dependencies: All task modules, configs
System role: Pipeline orchestration (coordinates only)
"""

import logging
import time
import uuid
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from compliance_portal.boundary.db.models.document_model import ProcessingStatus
from compliance_portal.boundary.extraction.base import TextExtractor
from compliance_portal.boundary.vdb.vector_store_client import VectorStoreClient
from compliance_portal.configs.ingestion import IngestionSettings
from compliance_portal.core.document_processing.chunking import EnhancedChunker
from compliance_portal.core.document_processing.database import DocumentStatusUpdater
from compliance_portal.core.document_processing.models import (
    IngestionSource,
    IngestionStatus,
    PipelineResult,
)
from compliance_portal.core.document_processing.tasks import (
    ChunkingTask,
    DocumentFields,
    ExtractionTask,
    IndexingTask,
)
from compliance_portal.core.exceptions import CompliancePortalException

logger = logging.getLogger(__name__)

NO_CHUNKS_INDEXED = "No chunks could be indexed; embedding failed for every chunk"


class IngestionPipeline:
    """Orchestrate document ingestion: extract -> persist content -> chunk -> embed+upsert."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        extractor: TextExtractor,
        vector_client: VectorStoreClient,
        chunker: EnhancedChunker | None = None,
        settings: IngestionSettings | None = None,
        status_updater: DocumentStatusUpdater | None = None,
    ) -> None:
        """
        Initialize pipeline with its collaborators.

        Args:
            session_factory: Session factory for status updates
            extractor: Text extractor (usually the routing chain)
            vector_client: Embedding + vector facade
            chunker: Chunker (default settings if None)
            settings: Ingestion settings (loaded from environment if None)
            status_updater: Status persistence (built from session_factory if None)
        """
        self._settings = settings or IngestionSettings()
        self._status = status_updater or DocumentStatusUpdater(session_factory)
        self._vector_client = vector_client
        self._extraction_task = ExtractionTask(extractor)
        self._chunking_task = ChunkingTask(chunker)
        self._indexing_task = IndexingTask(
            vector_client,
            concurrency=self._settings.embedding_concurrency,
            progress_batch_size=self._settings.progress_batch_size,
        )

    async def process(self, document_id: str | UUID, source: IngestionSource) -> PipelineResult:
        """
        Process one document through the full pipeline.

        Never raises for ingestion failures: they are recorded on the
        document and reflected in the returned result.

        Args:
            document_id: Document UUID (row must exist in UPLOADED)
            source: File bytes or URL

        Returns:
            PipelineResult: Final status, chunk counts and timing
        """
        doc_uuid = document_id if isinstance(document_id, UUID) else uuid.UUID(str(document_id))
        doc_id = str(doc_uuid)
        start_time = time.perf_counter()
        logger.info(f"{__name__}:process - START", extra={"document_id": doc_id})

        def elapsed_ms() -> float:
            return (time.perf_counter() - start_time) * 1000

        document = await self._status.get_document(doc_uuid)
        fields = DocumentFields(
            title=document.title,
            state=document.state,
            document_types=list(document.document_types or []),
            verticals=list(document.verticals or []),
        )

        await self._status.mark_extracting(doc_uuid)
        try:
            extraction = await self._extraction_task.extract(source, doc_id)
        except CompliancePortalException as e:
            return await self._fail(doc_uuid, e.message, elapsed_ms())

        # Content is persisted before chunking so it survives later failures
        await self._status.save_content(doc_uuid, extraction.text)
        chunks = self._chunking_task.chunk(extraction)
        total = len(chunks)
        await self._status.mark_embedding(doc_uuid, total)

        async def on_progress(processed: int) -> None:
            await self._status.update_progress(doc_uuid, processed, total)

        outcome = await self._indexing_task.index(doc_id, chunks, fields, on_progress)

        if total > 0 and outcome.processed == 0:
            result = await self._fail(
                doc_uuid,
                NO_CHUNKS_INDEXED,
                elapsed_ms(),
                total_chunks=total,
                failed_chunk_indexes=outcome.failed_chunk_indexes,
            )
            result.extraction_method = extraction.metadata.method
            return result

        await self._status.mark_completed(doc_uuid, outcome.processed)
        if outcome.failed_chunk_indexes:
            logger.warning(
                f"{__name__}:process - Partial indexing",
                extra={
                    "document_id": doc_id,
                    "total": total,
                    "processed": outcome.processed,
                    "failed_chunk_indexes": outcome.failed_chunk_indexes,
                },
            )
        logger.info(
            f"{__name__}:process - SUCCESS",
            extra={"document_id": doc_id, "total_chunks": total, "processed_chunks": outcome.processed},
        )
        return PipelineResult(
            document_id=doc_id,
            status=ProcessingStatus.COMPLETED,
            total_chunks=total,
            processed_chunks=outcome.processed,
            failed_chunk_indexes=outcome.failed_chunk_indexes,
            extraction_method=extraction.metadata.method,
            processing_time_ms=elapsed_ms(),
        )

    async def _fail(
        self,
        document_id: UUID,
        message: str,
        processing_time_ms: float,
        total_chunks: int = 0,
        failed_chunk_indexes: list[int] | None = None,
    ) -> PipelineResult:
        logger.error(
            f"{__name__}:process - FAILED: {message}",
            extra={"document_id": str(document_id)},
        )
        await self._status.mark_failed(document_id, message, processed=0 if total_chunks else None)
        return PipelineResult(
            document_id=str(document_id),
            status=ProcessingStatus.FAILED,
            total_chunks=total_chunks,
            failed_chunk_indexes=failed_chunk_indexes or [],
            error_message=message,
            processing_time_ms=processing_time_ms,
        )

    async def reprocess(
        self,
        document_id: str | UUID,
        source: IngestionSource,
        reset: bool = True,
    ) -> PipelineResult:
        """
        Re-run ingestion from scratch.

        Resets the row to UPLOADED, deletes every existing vector for the
        document, and only then processes the source again.

        Args:
            document_id: Document to re-ingest
            source: Original bytes or URL
            reset: False when the caller already reset the row

        Raises:
            DocumentNotFoundError: No row with this id
            InvalidStatusTransitionError: Row is not COMPLETED or FAILED
            VectorStoreError: Old vectors could not be deleted
        """
        doc_uuid = document_id if isinstance(document_id, UUID) else uuid.UUID(str(document_id))
        logger.info(f"{__name__}:reprocess - START", extra={"document_id": str(doc_uuid)})
        if reset:
            await self._status.reset(doc_uuid)
        deleted = await self._vector_client.delete_document(str(doc_uuid))
        logger.info(
            f"{__name__}:reprocess - Old vectors removed",
            extra={"document_id": str(doc_uuid), "deleted": deleted},
        )
        return await self.process(doc_uuid, source)

    async def get_status(self, document_id: str | UUID) -> IngestionStatus:
        """
        Current ingestion status for pollers.

        Raises:
            DocumentNotFoundError: No row with this id
        """
        doc_uuid = document_id if isinstance(document_id, UUID) else uuid.UUID(str(document_id))
        return await self._status.get_status(doc_uuid)
