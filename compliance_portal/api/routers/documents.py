"""
Document API endpoints.

Routes:
- POST /documents - Upload a PDF, Markdown or text file (multipart)
- POST /documents/url - Ingest a web page or remote PDF
- GET /documents - List documents
- GET /documents/{id} - Get document
- GET /documents/{id}/status - Poll ingestion status
- POST /documents/{id}/reprocess - Re-run ingestion
- DELETE /documents/{id} - Delete document and its vectors

Dependencies: compliance_portal.application.services, compliance_portal.models
System role: Document HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from pydantic import ValidationError as PydanticValidationError

from compliance_portal.api.deps import get_document_service
from compliance_portal.application.services.document_service import DocumentService
from compliance_portal.boundary.db.models.document_model import ProcessingStatus
from compliance_portal.core.document_processing.models import IngestionStatus
from compliance_portal.core.exceptions import (
    DocumentNotFoundError,
    DocumentProcessingError,
    ValidationError,
    VectorStoreError,
)
from compliance_portal.models.document import (
    DocumentDeletedResponse,
    DocumentListResponse,
    DocumentMetadataInput,
    DocumentResponse,
    UrlUploadRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


def _split_values(values: list[str]) -> list[str]:
    """Accept repeated form fields as well as comma-separated values."""
    return [item.strip() for value in values for item in value.split(",") if item.strip()]


@router.post("", response_model=DocumentResponse, status_code=202)
async def upload_document(
    file: UploadFile = File(...),
    state: str = Form(...),
    title: str | None = Form(default=None),
    verticals: list[str] = Form(default=[]),
    document_types: list[str] = Form(default=[]),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    """
    Upload a document and start background ingestion.

    Returns immediately with the UPLOADED row; poll /documents/{id}/status.

    Raises:
        HTTPException(400): Unsupported, empty or oversized file, bad metadata
        HTTPException(500): Failed to create document
    """
    try:
        metadata = DocumentMetadataInput(
            title=title,
            state=state,
            verticals=_split_values(verticals),
            document_types=_split_values(document_types),
        )
    except PydanticValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    data = await file.read()
    try:
        document = await document_service.upload_file(
            file_bytes=data,
            filename=file.filename or "",
            content_type=file.content_type,
            metadata=metadata,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except Exception as e:
        logger.exception(
            "Failed to upload document",
            extra={"file_name": file.filename, "error": str(e)},
        )
        raise HTTPException(status_code=500, detail="Failed to upload document")

    return DocumentResponse.model_validate(document)


@router.post("/url", response_model=DocumentResponse, status_code=202)
async def upload_url(
    request: UrlUploadRequest,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    """Create a document from a URL and start background ingestion."""
    try:
        document = await document_service.upload_url(str(request.url), request)
    except Exception as e:
        logger.exception("Failed to create URL document", extra={"url": str(request.url), "error": str(e)})
        raise HTTPException(status_code=500, detail="Failed to create document")
    return DocumentResponse.model_validate(document)


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    state: str | None = Query(default=None),
    status: ProcessingStatus | None = Query(default=None),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentListResponse:
    """List documents newest first, optionally filtered by jurisdiction and status."""
    documents, total = await document_service.list_documents(
        limit=limit, offset=offset, state=state, status=status
    )
    return DocumentListResponse(
        documents=[DocumentResponse.model_validate(doc) for doc in documents],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: UUID,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    try:
        document = await document_service.get_document(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return DocumentResponse.model_validate(document)


@router.get("/{document_id}/status", response_model=IngestionStatus)
async def get_document_status(
    document_id: UUID,
    document_service: DocumentService = Depends(get_document_service),
) -> IngestionStatus:
    """
    Poll ingestion status.

    Raises:
        HTTPException(404): Document not found
    """
    try:
        return await document_service.get_status(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.post("/{document_id}/reprocess", response_model=DocumentResponse, status_code=202)
async def reprocess_document(
    document_id: UUID,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    """
    Re-run ingestion; old chunks are removed before new ones are written.

    Raises:
        HTTPException(404): Document not found
        HTTPException(409): Ingestion still running or source unavailable
    """
    try:
        document = await document_service.reprocess(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except DocumentProcessingError as e:
        raise HTTPException(status_code=409, detail=e.message)
    return DocumentResponse.model_validate(document)


@router.delete("/{document_id}", response_model=DocumentDeletedResponse)
async def delete_document(
    document_id: UUID,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentDeletedResponse:
    """
    Delete a document and all of its vector chunks.

    Raises:
        HTTPException(404): Document not found
        HTTPException(409): Ingestion still running
        HTTPException(502): Vector store delete failed; the document is kept
    """
    try:
        deleted = await document_service.delete_document(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except DocumentProcessingError as e:
        raise HTTPException(status_code=409, detail=e.message)
    except VectorStoreError as e:
        logger.error(
            "Vector cascade failed during delete",
            extra={"document_id": str(document_id), "error": str(e)},
        )
        raise HTTPException(status_code=502, detail="Vector store unavailable; document was not deleted")
    return DocumentDeletedResponse(document_id=document_id, vectors_deleted=deleted)
