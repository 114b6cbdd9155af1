"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field

from compliance_portal.configs.auxiliary import ActivitySettings, ReferenceDataSettings
from compliance_portal.configs.base import BaseSettings
from compliance_portal.configs.chunking import ChunkingSettings
from compliance_portal.configs.database import DatabaseSettings
from compliance_portal.configs.ingestion import IngestionSettings
from compliance_portal.configs.retrieval import GenerationSettings, RetrievalSettings
from compliance_portal.configs.vector_store import RetrySettings, VectorStoreSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root log level applied by configure_logging at startup",
    )
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    vector_store: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    reference_data: ReferenceDataSettings = Field(default_factory=ReferenceDataSettings)
    activity: ActivitySettings = Field(default_factory=ActivitySettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
