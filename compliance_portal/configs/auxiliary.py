"""
Auxiliary feature configuration settings.

Reference-data lookup and per-user activity storage.

Dependencies: pydantic, pydantic_settings
System role: Configuration for non-core portal features
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from compliance_portal.configs.base import BaseSettings


class ReferenceDataSettings(BaseSettings):
    """Remote reference data source with static fallback."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="REFERENCE_DATA_",
        case_sensitive=False,
        extra="ignore",
    )

    api_base_url: str | None = Field(
        default=None,
        description="Base URL of the authoritative reference-data API; static tables only when unset",
    )
    api_key: str | None = Field(default=None, description="Bearer token for the reference-data API")
    timeout: float = Field(default=10.0, description="HTTP timeout in seconds")
    max_retries: int = Field(default=2, ge=0, description="Retries after the first failed call")
    base_delay: float = Field(default=1.0, ge=0.0, description="First retry delay in seconds, doubled each retry")


class ActivitySettings(BaseSettings):
    """Storage for recent searches, bookmarks and recently viewed documents."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ACTIVITY_",
        case_sensitive=False,
        extra="ignore",
    )

    store_type: str = Field(default="file", description="'memory' or 'file'")
    data_directory: str = Field(default="./data/activity", description="Directory for JSON stores")
    bookmark_capacity: int = Field(default=100, ge=1)
    recent_document_capacity: int = Field(default=10, ge=1)
