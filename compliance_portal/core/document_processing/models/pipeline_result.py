"""
Pipeline input/output models.

Dependencies: pydantic
System role: Return types for IngestionPipeline.process() and get_status()
"""

from pydantic import BaseModel, Field, model_validator

from compliance_portal.boundary.db.models.document_model import ProcessingStatus


class IngestionSource(BaseModel):
    """Raw input for one ingestion run: file bytes or a URL."""

    file_bytes: bytes | None = None
    url: str | None = None
    filename: str | None = Field(default=None, description="Original filename, drives format detection")
    content_type: str | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "IngestionSource":
        if (self.file_bytes is None) == (self.url is None):
            raise ValueError("Provide exactly one of file_bytes or url")
        return self


class PipelineResult(BaseModel):
    """Result of one ingestion run."""

    document_id: str
    status: ProcessingStatus
    total_chunks: int = 0
    processed_chunks: int = 0
    failed_chunk_indexes: list[int] = Field(default_factory=list)
    extraction_method: str | None = None
    error_message: str | None = None
    processing_time_ms: float = 0.0


class IngestionStatus(BaseModel):
    """Status view exposed to pollers."""

    document_id: str
    status: ProcessingStatus
    progress: int = Field(ge=0, le=100)
    error: str | None = None
    total_chunks: int | None = None
    processed_chunks: int | None = None
