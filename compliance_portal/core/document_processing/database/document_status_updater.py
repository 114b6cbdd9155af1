"""
Document status updater.

Persists ingestion progress through the document CRUD state machine:
UPLOADED → EXTRACTING → CHUNKING → EMBEDDING → COMPLETED (or FAILED).

Every update runs in its own short session and commits immediately, so
pollers see progress while the pipeline is still running.

Dependencies: sqlalchemy, compliance_portal.boundary.db
System role: Database persistence layer for the ingestion pipeline
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from compliance_portal.boundary.db.CRUD.document_crud import document_crud
from compliance_portal.boundary.db.models.document_model import DocumentModel, ProcessingStatus
from compliance_portal.core.document_processing.models import IngestionStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")

EXTRACTING_PROGRESS = 10
CHUNKING_PROGRESS = 30
EMBEDDING_PROGRESS = 60
EMBEDDING_SPAN = 39
COMPLETED_PROGRESS = 100


def embedding_progress(processed: int, total: int) -> int:
    """Progress while embedding: 60 + floor(39 * processed / total)."""
    if total <= 0:
        return EMBEDDING_PROGRESS
    return EMBEDDING_PROGRESS + (EMBEDDING_SPAN * min(processed, total)) // total


class DocumentStatusUpdater:
    """Update document status during processing."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Initialize with a session factory.

        Args:
            session_factory: Factory producing one session per update
        """
        self._session_factory = session_factory

    async def _run(
        self,
        operation: str,
        document_id: UUID,
        work: Callable[[AsyncSession], Awaitable[T]],
    ) -> T:
        async with self._session_factory() as session:
            try:
                result = await work(session)
                await session.commit()
            except Exception as e:
                logger.error(
                    f"{__name__}:{operation} - {type(e).__name__}: {e}",
                    extra={"document_id": str(document_id)},
                )
                await session.rollback()
                raise
        return result

    async def get_document(self, document_id: UUID) -> DocumentModel:
        """Load a detached snapshot of the document row."""
        return await self._run(
            "get_document",
            document_id,
            lambda session: document_crud.get_required(session, document_id),
        )

    async def reset(self, document_id: UUID) -> None:
        await self._run(
            "reset",
            document_id,
            lambda session: document_crud.reset_for_reprocess(session, document_id),
        )
        logger.info(f"{__name__}:reset - Document reset to UPLOADED", extra={"document_id": str(document_id)})

    async def mark_extracting(self, document_id: UUID) -> None:
        await self._run(
            "mark_extracting",
            document_id,
            lambda session: document_crud.transition(
                session, document_id, ProcessingStatus.EXTRACTING, EXTRACTING_PROGRESS
            ),
        )

    async def save_content(self, document_id: UUID, content: str) -> None:
        """Persist extracted text together with the move to CHUNKING."""
        await self._run(
            "save_content",
            document_id,
            lambda session: document_crud.transition(
                session,
                document_id,
                ProcessingStatus.CHUNKING,
                CHUNKING_PROGRESS,
                content=content,
            ),
        )
        logger.info(
            f"{__name__}:save_content - Content persisted",
            extra={"document_id": str(document_id), "chars": len(content)},
        )

    async def mark_embedding(self, document_id: UUID, total_chunks: int) -> None:
        await self._run(
            "mark_embedding",
            document_id,
            lambda session: document_crud.transition(
                session,
                document_id,
                ProcessingStatus.EMBEDDING,
                EMBEDDING_PROGRESS,
                total_chunks=total_chunks,
                processed_chunks=0,
            ),
        )

    async def update_progress(self, document_id: UUID, processed: int, total: int) -> None:
        await self._run(
            "update_progress",
            document_id,
            lambda session: document_crud.transition(
                session,
                document_id,
                ProcessingStatus.EMBEDDING,
                embedding_progress(processed, total),
                processed_chunks=processed,
            ),
        )

    async def mark_completed(self, document_id: UUID, processed: int) -> None:
        await self._run(
            "mark_completed",
            document_id,
            lambda session: document_crud.transition(
                session,
                document_id,
                ProcessingStatus.COMPLETED,
                COMPLETED_PROGRESS,
                processed_chunks=processed,
                error_message=None,
            ),
        )
        logger.info(
            f"{__name__}:mark_completed - Document marked as COMPLETED",
            extra={"document_id": str(document_id), "processed_chunks": processed},
        )

    async def mark_failed(
        self,
        document_id: UUID,
        error_message: str,
        processed: int | None = None,
    ) -> None:
        """
        Mark document as FAILED; progress is left where it was.

        Args:
            document_id: Document UUID
            error_message: Human-readable error description
            processed: Processed chunk count to record, if known
        """

        async def work(session: AsyncSession) -> DocumentModel:
            document = await document_crud.mark_failed(session, document_id, error_message)
            if processed is not None:
                document.processed_chunks = processed
                await session.flush()
            return document

        await self._run("mark_failed", document_id, work)
        logger.info(
            f"{__name__}:mark_failed - Document marked as FAILED",
            extra={"document_id": str(document_id), "error_message": error_message[:200]},
        )

    async def get_status(self, document_id: UUID) -> IngestionStatus:
        document = await self.get_document(document_id)
        return IngestionStatus(
            document_id=str(document.id),
            status=document.processing_status,
            progress=document.processing_progress,
            error=document.error_message,
            total_chunks=document.total_chunks,
            processed_chunks=document.processed_chunks,
        )
