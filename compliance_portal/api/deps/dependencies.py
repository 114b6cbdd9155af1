"""
Dependency injection container.

Factory functions for FastAPI dependencies. Heavy collaborators (vector
client, generation provider, pipeline) are built once and cached.

Dependencies: compliance_portal.configs, compliance_portal.application, compliance_portal.boundary
System role: DI container for service injection
"""

from functools import lru_cache

from compliance_portal.application.services import (
    ActivityService,
    BackgroundTaskRegistry,
    ConsistencyService,
    DocumentService,
    ReferenceDataService,
    SearchService,
    build_activity_stores,
)
from compliance_portal.configs import Settings, get_settings


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings
        self._session_factory = None
        self._vector_client = None
        self._generation_provider = None
        self._pipeline = None
        self._resolver = None
        self._task_registry = None
        self._document_service = None
        self._activity_service = None
        self._search_service = None
        self._reference_data_service = None
        self._consistency_service = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def session_factory(self):
        """Get cached async session factory."""
        if self._session_factory is None:
            from compliance_portal.boundary.db.connection import get_async_session_factory
            self._session_factory = get_async_session_factory()
        return self._session_factory

    @property
    def vector_client(self):
        """Get cached vector store client."""
        if self._vector_client is None:
            from compliance_portal.boundary.vdb.vector_store_factory import build_vector_store_client
            self._vector_client = build_vector_store_client(self.settings)
        return self._vector_client

    @property
    def generation_provider(self):
        """Get cached generation provider."""
        if self._generation_provider is None:
            from compliance_portal.boundary.llm import build_generation_provider
            self._generation_provider = build_generation_provider(
                self.settings.generation, self.settings.retry
            )
        return self._generation_provider

    @property
    def pipeline(self):
        """Get cached ingestion pipeline."""
        if self._pipeline is None:
            from compliance_portal.boundary.extraction import build_extractor
            from compliance_portal.core.document_processing.chunking.enhanced_chunker import (
                EnhancedChunker,
            )
            from compliance_portal.core.document_processing.entrypoint import IngestionPipeline

            self._pipeline = IngestionPipeline(
                session_factory=self.session_factory,
                extractor=build_extractor(self.settings.ingestion),
                vector_client=self.vector_client,
                chunker=EnhancedChunker(self.settings.chunking),
                settings=self.settings.ingestion,
            )
        return self._pipeline

    @property
    def resolver(self):
        """Get cached retrieval resolver."""
        if self._resolver is None:
            from compliance_portal.core.retrieval.resolver import RetrievalResolver

            self._resolver = RetrievalResolver(
                vector_client=self.vector_client,
                generation_provider=self.generation_provider,
                session_factory=self.session_factory,
                settings=self.settings.retrieval,
                generation_settings=self.settings.generation,
            )
        return self._resolver

    @property
    def task_registry(self) -> BackgroundTaskRegistry:
        if self._task_registry is None:
            self._task_registry = BackgroundTaskRegistry()
        return self._task_registry

    @property
    def document_service(self) -> DocumentService:
        """Get cached document service."""
        if self._document_service is None:
            from compliance_portal.boundary.storage import LocalFileStore

            self._document_service = DocumentService(
                session_factory=self.session_factory,
                pipeline=self.pipeline,
                vector_client=self.vector_client,
                file_store=LocalFileStore(self.settings.ingestion.upload_directory),
                task_registry=self.task_registry,
            )
        return self._document_service

    @property
    def activity_service(self) -> ActivityService:
        if self._activity_service is None:
            self._activity_service = ActivityService(
                build_activity_stores(self.settings.activity),
                settings=self.settings.activity,
                recent_search_capacity=self.settings.retrieval.recent_search_capacity,
            )
        return self._activity_service

    @property
    def search_service(self) -> SearchService:
        if self._search_service is None:
            self._search_service = SearchService(self.resolver, self.activity_service)
        return self._search_service

    @property
    def reference_data_service(self) -> ReferenceDataService:
        if self._reference_data_service is None:
            self._reference_data_service = ReferenceDataService(self.settings.reference_data)
        return self._reference_data_service

    @property
    def consistency_service(self) -> ConsistencyService:
        if self._consistency_service is None:
            self._consistency_service = ConsistencyService(
                vector_client=self.vector_client,
                session_factory=self.session_factory,
                settings=self.settings.ingestion,
                delete_batch_size=self.settings.vector_store.upsert_batch_size,
            )
        return self._consistency_service

    def clear(self) -> None:
        """Clear all cached instances."""
        self._session_factory = None
        self._vector_client = None
        self._generation_provider = None
        self._pipeline = None
        self._resolver = None
        self._task_registry = None
        self._document_service = None
        self._activity_service = None
        self._search_service = None
        self._reference_data_service = None
        self._consistency_service = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_document_service() -> DocumentService:
    """
    Get document service instance.

    Returns:
        DocumentService: Shared service owning the background ingestion tasks
    """
    return get_service_cache().document_service


def get_search_service() -> SearchService:
    """
    Get search service instance.

    Uses the vector backend selected via VECTOR_STORE_STORE_TYPE and the
    generation provider selected via GENERATION_PROVIDER.

    Returns:
        SearchService: Search service with configured resolver
    """
    return get_service_cache().search_service


def get_activity_service() -> ActivityService:
    return get_service_cache().activity_service


def get_reference_data_service() -> ReferenceDataService:
    return get_service_cache().reference_data_service


def get_consistency_service() -> ConsistencyService:
    return get_service_cache().consistency_service


def get_vector_client():
    """Get the shared vector store client (health checks)."""
    return get_service_cache().vector_client
