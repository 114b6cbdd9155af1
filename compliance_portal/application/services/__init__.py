"""Service orchestrators."""

from .activity_service import ActivityService, build_activity_stores
from .consistency_service import ConsistencyService
from .document_service import DocumentService
from .reference_data_service import ReferenceDataService
from .search_service import SearchService
from .task_registry import BackgroundTaskRegistry

__all__ = [
    "ActivityService",
    "BackgroundTaskRegistry",
    "ConsistencyService",
    "DocumentService",
    "ReferenceDataService",
    "SearchService",
    "build_activity_stores",
]
