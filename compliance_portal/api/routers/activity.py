"""
User activity API endpoints.

Routes:
- GET /activity/{user_id}/recent-searches
- GET /activity/{user_id}/bookmarks
- POST /activity/{user_id}/bookmarks
- DELETE /activity/{user_id}/bookmarks/{document_id}
- GET /activity/{user_id}/recent-documents
- POST /activity/{user_id}/recent-documents/{document_id}

Dependencies: compliance_portal.application.services, compliance_portal.models
System role: Per-user activity HTTP API
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from compliance_portal.api.deps import get_activity_service, get_document_service
from compliance_portal.application.services.activity_service import ActivityService
from compliance_portal.application.services.document_service import DocumentService
from compliance_portal.core.exceptions import DocumentNotFoundError
from compliance_portal.models.activity import ActivityKind, ActivityListResponse, BookmarkRequest

router = APIRouter(prefix="/activity", tags=["activity"])


@router.get("/{user_id}/recent-searches", response_model=ActivityListResponse)
async def get_recent_searches(
    user_id: str,
    activity: ActivityService = Depends(get_activity_service),
) -> ActivityListResponse:
    entries = await activity.list_entries(user_id, ActivityKind.RECENT_SEARCH)
    return ActivityListResponse(user_id=user_id, kind=ActivityKind.RECENT_SEARCH, entries=entries)


@router.get("/{user_id}/bookmarks", response_model=ActivityListResponse)
async def get_bookmarks(
    user_id: str,
    activity: ActivityService = Depends(get_activity_service),
) -> ActivityListResponse:
    entries = await activity.list_entries(user_id, ActivityKind.BOOKMARK)
    return ActivityListResponse(user_id=user_id, kind=ActivityKind.BOOKMARK, entries=entries)


@router.post("/{user_id}/bookmarks", response_model=ActivityListResponse, status_code=201)
async def add_bookmark(
    user_id: str,
    request: BookmarkRequest,
    activity: ActivityService = Depends(get_activity_service),
) -> ActivityListResponse:
    """Bookmark a document; bookmarking it again moves it to the front."""
    entries = await activity.add_bookmark(user_id, request.document_id, request.title, request.note)
    return ActivityListResponse(user_id=user_id, kind=ActivityKind.BOOKMARK, entries=entries)


@router.delete("/{user_id}/bookmarks/{document_id}", status_code=204)
async def remove_bookmark(
    user_id: str,
    document_id: str,
    activity: ActivityService = Depends(get_activity_service),
) -> None:
    if not await activity.remove_bookmark(user_id, document_id):
        raise HTTPException(status_code=404, detail="Bookmark not found")


@router.get("/{user_id}/recent-documents", response_model=ActivityListResponse)
async def get_recent_documents(
    user_id: str,
    activity: ActivityService = Depends(get_activity_service),
) -> ActivityListResponse:
    entries = await activity.list_entries(user_id, ActivityKind.RECENT_DOCUMENT)
    return ActivityListResponse(user_id=user_id, kind=ActivityKind.RECENT_DOCUMENT, entries=entries)


@router.post("/{user_id}/recent-documents/{document_id}", response_model=ActivityListResponse)
async def record_document_view(
    user_id: str,
    document_id: UUID,
    activity: ActivityService = Depends(get_activity_service),
    document_service: DocumentService = Depends(get_document_service),
) -> ActivityListResponse:
    """Record that the user opened a document."""
    try:
        document = await document_service.get_document(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    entries = await activity.record_document_view(user_id, str(document.id), document.title)
    return ActivityListResponse(user_id=user_id, kind=ActivityKind.RECENT_DOCUMENT, entries=entries)
