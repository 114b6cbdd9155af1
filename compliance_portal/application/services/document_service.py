"""
Document service orchestrator.

Coordinates upload, background ingestion, reprocessing, status tracking
and deletion. Each ingestion runs as its own asyncio task; the HTTP call
returns as soon as the document row exists.

Dependencies: sqlalchemy, compliance_portal.core, compliance_portal.boundary
System role: Document management orchestration
"""

import logging
from collections.abc import Sequence
from pathlib import PurePosixPath
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from compliance_portal.application.services.task_registry import BackgroundTaskRegistry
from compliance_portal.boundary.db.CRUD.document_crud import document_crud
from compliance_portal.boundary.db.models.document_model import (
    DocumentModel,
    ProcessingStatus,
    SourceKind,
)
from compliance_portal.boundary.extraction.fallback_extractor import TEXT_SUFFIXES
from compliance_portal.boundary.storage.local_file_store import LocalFileStore
from compliance_portal.boundary.vdb.vector_store_client import VectorStoreClient
from compliance_portal.core.document_processing.database import DocumentStatusUpdater
from compliance_portal.core.document_processing.entrypoint import IngestionPipeline
from compliance_portal.core.document_processing.models import IngestionSource, IngestionStatus
from compliance_portal.core.exceptions import (
    DocumentNotFoundError,
    DocumentProcessingError,
    InvalidStatusTransitionError,
    ValidationError,
)
from compliance_portal.models.document import DocumentMetadataInput
from compliance_portal.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

ALLOWED_SUFFIXES = {".pdf", *TEXT_SUFFIXES}
MAX_UPLOAD_BYTES = 50 * 1024 * 1024
UNEXPECTED_FAILURE = "Processing failed unexpectedly; see server logs"


class DocumentService:
    """
    Document lifecycle: upload, ingestion scheduling, reprocess, delete.

    Ingestion status is owned by the pipeline; this service only creates
    rows, schedules work and cascades deletes to the vector store.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        pipeline: IngestionPipeline,
        vector_client: VectorStoreClient,
        file_store: LocalFileStore,
        task_registry: BackgroundTaskRegistry | None = None,
    ) -> None:
        """
        Initialize document service.

        Args:
            session_factory: Session factory for document rows
            pipeline: Ingestion pipeline
            vector_client: Vector facade used for delete cascades
            file_store: Keeps original uploads for reprocessing
            task_registry: Background task tracker (new one if None)
        """
        self._session_factory = session_factory
        self._pipeline = pipeline
        self._vector_client = vector_client
        self._file_store = file_store
        self.tasks = task_registry or BackgroundTaskRegistry()

    async def upload_file(
        self,
        file_bytes: bytes,
        filename: str,
        content_type: str | None,
        metadata: DocumentMetadataInput,
    ) -> DocumentModel:
        """
        Create a document for an uploaded file and start ingestion.

        Args:
            file_bytes: Raw file content
            filename: Original filename (drives format detection)
            content_type: MIME type reported by the client
            metadata: Title, jurisdiction and classification

        Returns:
            DocumentModel: The new row in UPLOADED state

        Raises:
            ValidationError: Empty, oversized or unsupported file
        """
        suffix = PurePosixPath(filename or "").suffix.lower()
        if suffix not in ALLOWED_SUFFIXES:
            raise ValidationError(
                f"Unsupported file type '{suffix or filename}'. Allowed: {', '.join(sorted(ALLOWED_SUFFIXES))}",
                field="file",
            )
        if not file_bytes:
            raise ValidationError("Uploaded file is empty", field="file")
        if len(file_bytes) > MAX_UPLOAD_BYTES:
            raise ValidationError("Uploaded file is larger than 50 MB", field="file")

        document = await self._create(
            title=metadata.title or PurePosixPath(filename).stem,
            source_kind=SourceKind.UPLOADED_FILE,
            source_uri=filename,
            metadata=metadata,
        )
        await self._file_store.save(str(document.id), filename, file_bytes)
        source = IngestionSource(file_bytes=file_bytes, filename=filename, content_type=content_type)
        self._schedule(document.id, source)
        return document

    async def upload_url(self, url: str, metadata: DocumentMetadataInput) -> DocumentModel:
        """Create a document for a URL and start ingestion."""
        document = await self._create(
            title=metadata.title or url,
            source_kind=SourceKind.SCRAPED_URL,
            source_uri=url,
            metadata=metadata,
        )
        self._schedule(document.id, IngestionSource(url=url))
        return document

    async def _create(
        self,
        title: str,
        source_kind: SourceKind,
        source_uri: str,
        metadata: DocumentMetadataInput,
    ) -> DocumentModel:
        async with self._session_factory() as session:
            document = await document_crud.create_document(
                session,
                title=title,
                source_kind=source_kind,
                source_uri=source_uri,
                state=metadata.state,
                verticals=metadata.verticals,
                document_types=metadata.document_types,
            )
            await session.commit()
        logger.info(
            f"{__name__}:_create - Document created",
            extra={"document_id": str(document.id), "source_kind": source_kind.value},
        )
        return document

    def _schedule(self, document_id: UUID, source: IngestionSource, reprocess: bool = False) -> None:
        self.tasks.schedule(
            self._run_ingestion(document_id, source, reprocess),
            name=f"ingest-{document_id}",
        )

    async def _run_ingestion(
        self,
        document_id: UUID,
        source: IngestionSource,
        reprocess: bool,
    ) -> None:
        """Task body: run the pipeline and make sure a crash leaves the row FAILED."""
        try:
            if reprocess:
                await self._pipeline.reprocess(document_id, source, reset=False)
            else:
                await self._pipeline.process(document_id, source)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_run_ingestion - Ingestion crashed",
                e,
                document_id=str(document_id),
                reprocess=reprocess,
            )
            await self._fail_after_crash(document_id)

    async def _fail_after_crash(self, document_id: UUID) -> None:
        updater = DocumentStatusUpdater(self._session_factory)
        try:
            await updater.mark_failed(document_id, UNEXPECTED_FAILURE)
        except (DocumentNotFoundError, InvalidStatusTransitionError) as e:
            logger.warning(
                f"{__name__}:_fail_after_crash - Not marked FAILED: {e.message}",
                extra={"document_id": str(document_id)},
            )

    async def reprocess(self, document_id: UUID) -> DocumentModel:
        """
        Re-run ingestion for an existing document from its original source.

        The row is reset to UPLOADED before the background run is scheduled,
        so a second request for the same document gets a conflict.

        Raises:
            DocumentNotFoundError: No row with this id
            DocumentProcessingError: Ingestion still running, or the original
                upload is no longer available
        """
        async with self._session_factory() as session:
            document = await document_crud.get_required(session, document_id)

        if not document.processing_status.is_terminal:
            raise DocumentProcessingError(
                f"Document is still {document.processing_status.value}; wait for it to finish",
                document_id=str(document_id),
            )

        if document.source_kind == SourceKind.SCRAPED_URL:
            source = IngestionSource(url=document.source_uri)
        else:
            data = await self._file_store.load(str(document_id))
            if data is None:
                raise DocumentProcessingError(
                    "Original upload is no longer available; upload the file again",
                    document_id=str(document_id),
                )
            source = IngestionSource(file_bytes=data, filename=document.source_uri)

        async with self._session_factory() as session:
            try:
                document = await document_crud.reset_for_reprocess(session, document_id)
            except InvalidStatusTransitionError as e:
                raise DocumentProcessingError(
                    f"Document is still {e.details['current']}; wait for it to finish",
                    document_id=str(document_id),
                ) from e
            await session.commit()

        self._schedule(document_id, source, reprocess=True)
        logger.info(f"{__name__}:reprocess - Scheduled", extra={"document_id": str(document_id)})
        return document

    async def get_document(self, document_id: UUID) -> DocumentModel:
        async with self._session_factory() as session:
            return await document_crud.get_required(session, document_id)

    async def get_status(self, document_id: UUID) -> IngestionStatus:
        return await self._pipeline.get_status(document_id)

    async def list_documents(
        self,
        limit: int = 50,
        offset: int = 0,
        state: str | None = None,
        status: ProcessingStatus | None = None,
    ) -> tuple[Sequence[DocumentModel], int]:
        """Page of documents (newest first) and the total row count."""
        async with self._session_factory() as session:
            documents = await document_crud.list_documents(
                session, limit=limit, offset=offset, state=state, status=status
            )
            total = await document_crud.count(session, state=state, status=status)
        return documents, total

    async def delete_document(self, document_id: UUID) -> int:
        """
        Delete a document and every vector chunk it owns.

        Only COMPLETED or FAILED documents can be deleted; an in-flight
        ingestion would otherwise write vectors for a row that is gone.
        Vectors go first; if that fails the row stays so the delete can be
        retried.

        Returns:
            int: Number of vectors deleted

        Raises:
            DocumentNotFoundError: No row with this id
            DocumentProcessingError: Ingestion still running
            VectorStoreError: Vector cascade failed
        """
        async with self._session_factory() as session:
            document = await document_crud.get_required(session, document_id)

        if not document.processing_status.is_terminal:
            raise DocumentProcessingError(
                f"Document is still {document.processing_status.value}; wait for ingestion to finish before deleting",
                document_id=str(document_id),
            )

        deleted = await self._vector_client.delete_document(str(document_id))
        async with self._session_factory() as session:
            await document_crud.delete_by_id(session, document_id)
            await session.commit()
        await self._file_store.delete(str(document_id))

        logger.info(
            f"{__name__}:delete_document - SUCCESS",
            extra={"document_id": str(document_id), "vectors_deleted": deleted},
        )
        return deleted
