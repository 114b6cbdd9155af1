"""
Document ORM model.

Represents regulatory documents with extracted content, jurisdiction
metadata and ingestion progress.

Dependencies: sqlalchemy, compliance_portal.boundary.db.base
System role: Document persistence for ingestion tracking and retrieval guards
"""

import enum

from sqlalchemy import JSON, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from compliance_portal.boundary.db.base import Base, TimestampMixin, UUIDMixin


class ProcessingStatus(str, enum.Enum):
    """
    Document ingestion lifecycle states.

    UPLOADED: Row created, pipeline not started
    EXTRACTING: Text extraction in progress
    CHUNKING: Content persisted, chunks being computed
    EMBEDDING: Chunks being embedded and upserted
    COMPLETED: At least one chunk indexed (or the text produced none)
    FAILED: Terminal failure; error_message holds the reason
    """

    UPLOADED = "UPLOADED"
    EXTRACTING = "EXTRACTING"
    CHUNKING = "CHUNKING"
    EMBEDDING = "EMBEDDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def rank(self) -> int:
        """Position in the forward pipeline order; FAILED sorts last."""
        return _STATUS_ORDER.index(self)

    @property
    def is_terminal(self) -> bool:
        return self in (ProcessingStatus.COMPLETED, ProcessingStatus.FAILED)


_STATUS_ORDER = [
    ProcessingStatus.UPLOADED,
    ProcessingStatus.EXTRACTING,
    ProcessingStatus.CHUNKING,
    ProcessingStatus.EMBEDDING,
    ProcessingStatus.COMPLETED,
    ProcessingStatus.FAILED,
]


class SourceKind(str, enum.Enum):
    """Where a document's bytes came from."""

    UPLOADED_FILE = "uploaded_file"
    SCRAPED_URL = "scraped_url"


class DocumentModel(Base, UUIDMixin, TimestampMixin):
    """
    Document ORM model tracking ingestion pipeline state.

    Lifecycle: Upload (UPLOADED) → EXTRACTING → CHUNKING → EMBEDDING →
    COMPLETED, or FAILED from any non-terminal state. Only the ingestion
    pipeline and the repair tooling write status columns.

    Attributes:
        id: UUID primary key (auto-generated)
        title: Display title
        content: Extracted text, null until extraction succeeds
        source_kind: uploaded_file or scraped_url
        source_uri: Original filename or URL
        processing_status: Current ingestion state
        processing_progress: 0-100, never decreases within a run
        total_chunks: Chunks produced by the chunker (set at EMBEDDING)
        processed_chunks: Chunks actually upserted to the vector index
        error_message: Human-readable failure reason
        state: Jurisdiction code (e.g. "CO")
        verticals: Gaming verticals this document applies to
        document_types: Document type slugs (regulation, statute, ...)
    """

    __tablename__ = "documents"

    title: Mapped[str] = mapped_column(String(512), nullable=False)

    content: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        doc="Canonical extracted text; chunk offsets index into this",
    )

    source_kind: Mapped[SourceKind] = mapped_column(
        Enum(SourceKind, native_enum=False, length=32),
        nullable=False,
        default=SourceKind.UPLOADED_FILE,
    )

    source_uri: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    processing_status: Mapped[ProcessingStatus] = mapped_column(
        Enum(ProcessingStatus, native_enum=False, length=32),
        nullable=False,
        default=ProcessingStatus.UPLOADED,
        index=True,
    )

    processing_progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    total_chunks: Mapped[int | None] = mapped_column(Integer, nullable=True)
    processed_chunks: Mapped[int | None] = mapped_column(Integer, nullable=True)

    error_message: Mapped[str | None] = mapped_column(
        String(2048),
        nullable=True,
        doc="Error details if processing failed",
    )

    state: Mapped[str | None] = mapped_column(String(8), nullable=True, index=True)
    verticals: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    document_types: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
