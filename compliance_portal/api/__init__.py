"""
API routes module.

FastAPI routers for all HTTP endpoints.
"""

from fastapi import APIRouter

from .routers import (
    activity_router,
    documents_router,
    health_router,
    maintenance_router,
    reference_data_router,
    search_router,
)

api_router = APIRouter()

# Include all routers
api_router.include_router(health_router)
api_router.include_router(documents_router)
api_router.include_router(search_router)
api_router.include_router(reference_data_router)
api_router.include_router(activity_router)
api_router.include_router(maintenance_router)

__all__ = ["api_router"]
