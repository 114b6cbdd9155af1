"""
Health check API endpoints.

Routes: GET /health, GET /health/vector-store

Dependencies: compliance_portal.boundary
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends, HTTPException

from compliance_portal import __version__
from compliance_portal.api.deps import get_vector_client
from compliance_portal.boundary.vdb.vector_store_client import VectorStoreClient
from compliance_portal.core.exceptions import VectorStoreError
from compliance_portal.models.common import HealthResponse

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", version=__version__)


@router.get("/vector-store", response_model=HealthResponse)
async def health_check_vector_store(
    vector_client: VectorStoreClient = Depends(get_vector_client),
) -> HealthResponse:
    """Vector store health check with index statistics."""
    try:
        stats = await vector_client.get_index_stats()
    except VectorStoreError:
        raise HTTPException(status_code=503, detail="Vector store unavailable")
    return HealthResponse(status="healthy", version=__version__, details=stats.model_dump())
