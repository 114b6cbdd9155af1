"""API routers."""

from .activity import router as activity_router
from .documents import router as documents_router
from .health import router as health_router
from .maintenance import router as maintenance_router
from .reference_data import router as reference_data_router
from .search import router as search_router

__all__ = [
    "activity_router",
    "documents_router",
    "health_router",
    "maintenance_router",
    "reference_data_router",
    "search_router",
]
