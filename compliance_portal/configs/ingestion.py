"""
Ingestion pipeline configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Pipeline orchestration configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from compliance_portal.configs.base import BaseSettings


class IngestionSettings(BaseSettings):
    """Settings for the document ingestion pipeline."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="INGESTION_",
        case_sensitive=False,
        extra="ignore",
    )

    progress_batch_size: int = Field(
        default=10,
        ge=1,
        description="Persist progress after this many processed chunks",
    )
    embedding_concurrency: int = Field(
        default=4,
        ge=1,
        description="Chunks embedded and upserted at the same time",
    )
    stuck_timeout_minutes: int = Field(
        default=30,
        ge=1,
        description="Age after which UPLOADED/EXTRACTING documents count as stuck",
    )
    url_fetch_timeout: float = Field(default=30.0, description="Timeout for URL sources in seconds")
    url_max_chars: int = Field(default=500_000, description="Extracted text cap for URL sources")
    upload_directory: str = Field(
        default="./data/uploads",
        description="Where original uploads are kept for reprocessing",
    )
