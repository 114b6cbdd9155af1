"""
Errors raised across the compliance portal.

Every error carries a human-readable ``message`` (what routers return as
the HTTP detail) and a flat ``details`` dict for logs. Keyword context
given at the raise site (``field``, ``document_id``, ``operation``...) is
merged into ``details``; ``None`` values are left out.

Routers map these to status codes: ValidationError 400,
DocumentNotFoundError 404, DocumentProcessingError 409, storage and
generation failures 502.

Dependencies: None
System role: Shared error types for boundary, core and application layers
"""

from typing import Any


class CompliancePortalException(Exception):
    """Root of the portal's error types."""

    def __init__(self, message: str, details: dict[str, Any] | None = None, **context: Any) -> None:
        self.message = message
        self.details = dict(details or {})
        self.details.update({key: value for key, value in context.items() if value is not None})
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(CompliancePortalException):
    """Rejected user input; ``field`` names the offending field."""


class DocumentNotFoundError(CompliancePortalException):
    def __init__(self, document_id: str) -> None:
        super().__init__(f"Document not found: {document_id}", document_id=document_id)


class InvalidStatusTransitionError(CompliancePortalException):
    """
    A status change the ingestion state machine does not allow.

    ``details`` holds ``current`` and ``requested`` so callers can explain
    which state the document is stuck in.
    """

    def __init__(self, document_id: str, current: str, requested: str) -> None:
        super().__init__(
            f"Cannot move document {document_id} from {current} to {requested}",
            document_id=document_id,
            current=current,
            requested=requested,
        )


class DocumentProcessingError(CompliancePortalException):
    """Ingestion or lifecycle conflict for one document."""


class ExtractionError(DocumentProcessingError):
    """No usable text could be pulled from a source (``source_type``: pdf, text, url...)."""


class EmbeddingError(DocumentProcessingError):
    pass


class VectorStoreError(CompliancePortalException):
    """Vector backend call failed after retries; ``operation`` says which."""


class GenerationError(CompliancePortalException):
    """Answer generation failed after retries; ``provider`` names the model backend."""


class ReferenceDataError(CompliancePortalException):
    """Remote states/verticals/document-types payload is unusable."""
