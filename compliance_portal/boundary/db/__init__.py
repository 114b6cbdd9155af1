"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Connection management
  - DocumentModel, ProcessingStatus, SourceKind: Document entity and enums
  - document_crud: CRUD singleton

Dependencies: sqlalchemy, compliance_portal.configs
System role: Relational store for document metadata and extracted content
"""

from compliance_portal.boundary.db.base import Base, TimestampMixin, UUIDMixin
from compliance_portal.boundary.db.connection import (
    create_engine_from_settings,
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from compliance_portal.boundary.db.CRUD import BaseCRUD, DocumentCRUD, document_crud
from compliance_portal.boundary.db.models import DocumentModel, ProcessingStatus, SourceKind

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "create_engine_from_settings",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    "BaseCRUD",
    "DocumentCRUD",
    "document_crud",
    "DocumentModel",
    "ProcessingStatus",
    "SourceKind",
]
