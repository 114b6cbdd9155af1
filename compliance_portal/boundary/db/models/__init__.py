"""ORM models."""

from compliance_portal.boundary.db.models.document_model import (
    DocumentModel,
    ProcessingStatus,
    SourceKind,
)

__all__ = ["DocumentModel", "ProcessingStatus", "SourceKind"]
