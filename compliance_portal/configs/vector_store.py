"""
Vector store configuration settings.

Selects the vector backend and embedding model, and sets the retry policy
for transient embedding/vector failures.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for indexing and retrieval
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from compliance_portal.configs.base import BaseSettings


class RetrySettings(BaseSettings):
    """Exponential backoff policy shared by provider calls."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="RETRY_",
        case_sensitive=False,
        extra="ignore",
    )

    max_attempts: int = Field(default=5, ge=1, description="Total attempts including the first")
    initial_wait: float = Field(default=1.0, ge=0.0, description="First backoff in seconds")
    max_wait: float = Field(default=30.0, ge=0.0, description="Backoff ceiling in seconds")
    jitter: float = Field(default=5.0, ge=0.0, description="Random jitter added to each wait")


class VectorStoreSettings(BaseSettings):
    """Vector store configuration (in-memory for tests, FAISS on disk for local/dev)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="VECTOR_STORE_",
        case_sensitive=False,
        extra="ignore",
    )

    store_type: str = Field(
        default="faiss",
        description="Vector backend: 'memory' or 'faiss'",
    )
    namespace: str = Field(default="compliance-docs", description="Logical partition for all chunks")
    persist_directory: str = Field(
        default="./.faiss_index",
        description="Directory where FAISS namespaces are persisted",
    )

    embedding_provider: str = Field(
        default="google",
        description="Embedding provider: 'google' (Gemini) or 'hash' (deterministic, offline)",
    )
    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Google Gemini embedding model ID",
    )
    embedding_dimension: int = Field(default=1024, description="Embedding vector dimension")

    upsert_batch_size: int = Field(default=100, description="Maximum ids per delete/upsert call")
    scan_page_size: int = Field(default=1000, description="Entries fetched per enumeration page")
