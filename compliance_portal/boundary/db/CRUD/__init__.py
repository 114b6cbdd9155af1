"""
CRUD operations for database models.

Usage:
    from compliance_portal.boundary.db.CRUD import document_crud

    document = await document_crud.get_by_id(db, document_id)
"""

from compliance_portal.boundary.db.CRUD.base_crud import BaseCRUD
from compliance_portal.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud

__all__ = ["BaseCRUD", "DocumentCRUD", "document_crud"]
