"""
Document domain models and schemas.

Request/response schemas for document operations.

Dependencies: pydantic
System role: Document API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from compliance_portal.boundary.db.models.document_model import ProcessingStatus, SourceKind


class DocumentMetadataInput(BaseModel):
    """Classification fields supplied at upload time."""

    title: str | None = Field(default=None, max_length=512)
    state: str = Field(min_length=2, max_length=8, description="Jurisdiction code, e.g. CO")
    verticals: list[str] = Field(default_factory=list)
    document_types: list[str] = Field(default_factory=list)

    @field_validator("state")
    @classmethod
    def _upper_state(cls, value: str) -> str:
        return value.strip().upper()


class UrlUploadRequest(DocumentMetadataInput):
    """Request schema for ingesting a web page or remote PDF."""

    url: HttpUrl


class DocumentResponse(BaseModel):
    """Response schema for document operations."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    source_kind: SourceKind
    source_uri: str | None = None
    state: str | None = None
    verticals: list[str] = Field(default_factory=list)
    document_types: list[str] = Field(default_factory=list)
    processing_status: ProcessingStatus
    processing_progress: int
    total_chunks: int | None = None
    processed_chunks: int | None = None
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime


class DocumentListResponse(BaseModel):
    """Paginated document list response."""

    documents: list[DocumentResponse]
    total: int
    limit: int
    offset: int


class DocumentDeletedResponse(BaseModel):
    document_id: uuid.UUID
    vectors_deleted: int
