"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    ServiceCache,
    get_activity_service,
    get_consistency_service,
    get_document_service,
    get_reference_data_service,
    get_search_service,
    get_service_cache,
    get_settings_dependency,
    get_vector_client,
)

__all__ = [
    "ServiceCache",
    "get_activity_service",
    "get_consistency_service",
    "get_document_service",
    "get_reference_data_service",
    "get_search_service",
    "get_service_cache",
    "get_settings_dependency",
    "get_vector_client",
]
