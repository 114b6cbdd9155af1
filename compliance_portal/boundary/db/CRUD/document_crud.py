"""
Document CRUD operations.

Extends BaseCRUD with the ingestion state machine: forward-only status
transitions, monotonic progress, explicit reprocess reset, and the id
lookups used by the retrieval existence guard and the repair tooling.

Dependencies: sqlalchemy, compliance_portal.boundary.db.models
System role: Document persistence operations
"""

import uuid
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from compliance_portal.boundary.db.CRUD.base_crud import BaseCRUD
from compliance_portal.boundary.db.models.document_model import (
    DocumentModel,
    ProcessingStatus,
    SourceKind,
)
from compliance_portal.core.exceptions import (
    DocumentNotFoundError,
    InvalidStatusTransitionError,
)

MAX_ERROR_LENGTH = 2000
TERMINAL_STATUSES = (ProcessingStatus.COMPLETED, ProcessingStatus.FAILED)


def _to_uuid(value: str | UUID) -> UUID | None:
    if isinstance(value, UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """CRUD operations for DocumentModel."""

    def __init__(self) -> None:
        super().__init__(DocumentModel)

    async def create_document(
        self,
        session: AsyncSession,
        title: str,
        source_kind: SourceKind = SourceKind.UPLOADED_FILE,
        source_uri: str | None = None,
        state: str | None = None,
        verticals: list[str] | None = None,
        document_types: list[str] | None = None,
    ) -> DocumentModel:
        """
        Create a document row in UPLOADED state.

        Args:
            session: Async database session
            title: Display title
            source_kind: Uploaded file or scraped URL
            source_uri: Original filename or URL
            state: Jurisdiction code
            verticals: Vertical slugs
            document_types: Document type slugs

        Returns:
            DocumentModel: The new row
        """
        return await self.create(
            session,
            title=title,
            source_kind=source_kind,
            source_uri=source_uri,
            state=state.upper() if state else None,
            verticals=list(verticals or []),
            document_types=list(document_types or []),
            processing_status=ProcessingStatus.UPLOADED,
            processing_progress=0,
        )

    async def get_required(self, session: AsyncSession, id: UUID) -> DocumentModel:
        """
        Retrieve a document or raise.

        Raises:
            DocumentNotFoundError: No row with this id
        """
        document = await self.get_by_id(session, id)
        if document is None:
            raise DocumentNotFoundError(str(id))
        return document

    async def list_documents(
        self,
        session: AsyncSession,
        limit: int | None = 50,
        offset: int = 0,
        state: str | None = None,
        status: ProcessingStatus | None = None,
    ) -> Sequence[DocumentModel]:
        """
        List documents newest first with optional jurisdiction/status filters.

        Args:
            session: Async database session
            limit: Page size (None for all)
            offset: Rows to skip
            state: Jurisdiction code filter
            status: Processing status filter

        Returns:
            Sequence of DocumentModels
        """
        stmt = select(DocumentModel).order_by(DocumentModel.created_at.desc())
        if state:
            stmt = stmt.where(DocumentModel.state == state.upper())
        if status is not None:
            stmt = stmt.where(DocumentModel.processing_status == status)
        stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count(
        self,
        session: AsyncSession,
        state: str | None = None,
        status: ProcessingStatus | None = None,
    ) -> int:
        stmt = select(func.count()).select_from(DocumentModel)
        if state:
            stmt = stmt.where(DocumentModel.state == state.upper())
        if status is not None:
            stmt = stmt.where(DocumentModel.processing_status == status)
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def get_by_statuses(
        self,
        session: AsyncSession,
        statuses: Iterable[ProcessingStatus],
        updated_before: datetime | None = None,
    ) -> Sequence[DocumentModel]:
        """
        Retrieve documents in any of the given states.

        Args:
            session: Async database session
            statuses: States to match
            updated_before: Only rows whose updated_at is older than this

        Returns:
            Sequence of matching DocumentModels
        """
        stmt = select(DocumentModel).where(
            DocumentModel.processing_status.in_(list(statuses))
        )
        if updated_before is not None:
            stmt = stmt.where(DocumentModel.updated_at < updated_before)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_ids(self, session: AsyncSession) -> set[str]:
        """Return every document id as a string."""
        result = await session.execute(select(DocumentModel.id))
        return {str(doc_id) for doc_id in result.scalars().all()}

    async def get_existing_ids(
        self,
        session: AsyncSession,
        ids: Iterable[str | UUID],
    ) -> set[str]:
        """
        Return the subset of ids that still have a document row.

        Malformed ids are treated as missing.

        Args:
            session: Async database session
            ids: Candidate document ids (strings or UUIDs)

        Returns:
            set[str]: Ids (string form) present in the table
        """
        parsed = {u for u in (_to_uuid(i) for i in ids) if u is not None}
        if not parsed:
            return set()
        stmt = select(DocumentModel.id).where(DocumentModel.id.in_(parsed))
        result = await session.execute(stmt)
        return {str(doc_id) for doc_id in result.scalars().all()}

    async def transition(
        self,
        session: AsyncSession,
        id: UUID,
        status: ProcessingStatus,
        progress: int | None = None,
        **fields: Any,
    ) -> DocumentModel:
        """
        Move a document forward through the ingestion state machine.

        Staying in the same non-terminal state is allowed (progress
        updates). FAILED is reachable from any non-terminal state.
        Progress is clamped to 0-100 and never lowered.

        Args:
            session: Async database session
            id: Document UUID
            status: Target status
            progress: Requested progress percentage
            **fields: Additional columns to set (content, counts, error)

        Returns:
            DocumentModel: The updated row

        Raises:
            DocumentNotFoundError: No row with this id
            InvalidStatusTransitionError: Target is behind the current state
                or the current state is terminal
        """
        document = await self.get_required(session, id)
        current = document.processing_status

        allowed = (
            not current.is_terminal
            and (status == ProcessingStatus.FAILED or status.rank >= current.rank)
        )
        if not allowed:
            raise InvalidStatusTransitionError(str(id), current.value, status.value)

        document.processing_status = status
        if progress is not None:
            clamped = max(0, min(100, progress))
            document.processing_progress = max(document.processing_progress, clamped)
        for field, value in fields.items():
            setattr(document, field, value)

        await session.flush()
        return document

    async def mark_failed(
        self,
        session: AsyncSession,
        id: UUID,
        error_message: str,
    ) -> DocumentModel:
        """
        Mark document as FAILED with error details (progress is kept).

        Args:
            session: Async database session
            id: Document UUID
            error_message: Human-readable error description

        Returns:
            DocumentModel: The updated row
        """
        return await self.transition(
            session,
            id,
            ProcessingStatus.FAILED,
            error_message=error_message[:MAX_ERROR_LENGTH],
        )

    async def reset_for_reprocess(self, session: AsyncSession, id: UUID) -> DocumentModel:
        """
        Reset a document to UPLOADED for an explicit reprocess.

        The only backward move the state machine allows, and only from
        COMPLETED or FAILED. The status check and the reset are one
        conditional UPDATE, so of two concurrent resets only one succeeds.
        Content and chunk counts are cleared so the content invariant
        holds again.

        Args:
            session: Async database session
            id: Document UUID

        Returns:
            DocumentModel: The reset row

        Raises:
            DocumentNotFoundError: No row with this id
            InvalidStatusTransitionError: Ingestion is still running
        """
        stmt = (
            update(DocumentModel)
            .where(
                DocumentModel.id == id,
                DocumentModel.processing_status.in_(TERMINAL_STATUSES),
            )
            .values(
                processing_status=ProcessingStatus.UPLOADED,
                processing_progress=0,
                content=None,
                total_chunks=None,
                processed_chunks=None,
                error_message=None,
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await session.execute(stmt)
        document = await self.get_required(session, id)
        if result.rowcount == 0:
            raise InvalidStatusTransitionError(
                str(id), document.processing_status.value, ProcessingStatus.UPLOADED.value
            )
        await session.refresh(document)
        return document


document_crud = DocumentCRUD()
