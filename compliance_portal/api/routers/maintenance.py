"""
Maintenance API endpoints.

Routes:
- POST /maintenance/orphans - Find (and optionally delete) orphaned vectors
- GET /maintenance/consistency - Compare stored content with indexed chunks
- POST /maintenance/stuck - Fail ingestions stuck past the timeout

Dependencies: compliance_portal.application.services, compliance_portal.core.consistency
System role: Consistency and repair HTTP API
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from compliance_portal.api.deps import get_consistency_service
from compliance_portal.application.services.consistency_service import ConsistencyService
from compliance_portal.core.consistency import CleanupResult, ConsistencySummary, StuckDocument
from compliance_portal.core.exceptions import VectorStoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@router.post("/orphans", response_model=CleanupResult)
async def cleanup_orphans(
    dry_run: bool = Query(default=True, description="Report only; delete nothing"),
    service: ConsistencyService = Depends(get_consistency_service),
) -> CleanupResult:
    """
    Detect vectors whose document no longer exists and optionally delete them.

    Raises:
        HTTPException(502): Vector store unavailable
    """
    try:
        return await service.cleanup_orphans(dry_run=dry_run)
    except VectorStoreError as e:
        logger.error("Orphan cleanup failed", extra={"error": str(e)})
        raise HTTPException(status_code=502, detail="Vector store unavailable")


@router.get("/consistency", response_model=ConsistencySummary)
async def verify_consistency(
    limit: int | None = Query(default=None, ge=1),
    service: ConsistencyService = Depends(get_consistency_service),
) -> ConsistencySummary:
    try:
        return await service.verify_content(limit=limit)
    except VectorStoreError as e:
        logger.error("Consistency verification failed", extra={"error": str(e)})
        raise HTTPException(status_code=502, detail="Vector store unavailable")


@router.post("/stuck", response_model=list[StuckDocument])
async def fail_stuck_documents(
    timeout_minutes: int | None = Query(default=None, ge=1),
    dry_run: bool = Query(default=False),
    service: ConsistencyService = Depends(get_consistency_service),
) -> list[StuckDocument]:
    """Mark UPLOADED/EXTRACTING documents older than the timeout as FAILED."""
    return await service.fail_stuck_documents(timeout_minutes=timeout_minutes, dry_run=dry_run)
