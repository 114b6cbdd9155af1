"""
Retrieval and answer generation configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Search and LLM provider configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from compliance_portal.configs.base import BaseSettings


class RetrievalSettings(BaseSettings):
    """Settings for vector retrieval and citation resolution."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="RETRIEVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    top_k: int = Field(default=20, ge=1, le=200, description="Source chunks retrieved per query")
    min_similarity: float = Field(
        default=0.3,
        ge=-1.0,
        le=1.0,
        description="Similarity floor; lower-scoring chunks are discarded",
    )
    fallback_citation_count: int = Field(
        default=3,
        ge=1,
        description="Chunks cited directly when the answer carries no markers",
    )
    recent_search_capacity: int = Field(default=10, ge=1)


class GenerationSettings(BaseSettings):
    """Settings for the answer generation provider."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="GENERATION_",
        case_sensitive=False,
        extra="ignore",
    )

    provider: str = Field(
        default="google",
        description="Generation provider: 'google' (Gemini) or 'bedrock' (Claude via Bedrock)",
    )
    model: str = Field(default="gemini-2.5-flash", description="Provider model identifier")
    region: str = Field(default="us-east-1", description="AWS region for the bedrock provider")
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2000, ge=1)
