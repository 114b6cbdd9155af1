"""
Chunking configuration settings.

Controls chunk size, context windows and boundary snapping for the
enhanced chunker.

Dependencies: pydantic, pydantic_settings
System role: Chunker configuration
"""

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from compliance_portal.configs.base import BaseSettings


class ChunkingSettings(BaseSettings):
    """Settings for citation-safe chunking."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CHUNKING_",
        case_sensitive=False,
        extra="ignore",
    )

    chunk_size: int = Field(default=1000, gt=0, description="Target chunk length in characters")
    context_radius: int = Field(
        default=200,
        ge=0,
        description="Characters kept on each side of a chunk for prompting only",
    )
    preserve_sentences: bool = Field(default=True, description="Snap boundaries to sentence ends")
    preserve_paragraphs: bool = Field(default=True, description="Snap boundaries to paragraph breaks")
    chunk_overlap: int = Field(default=0, ge=0, description="Characters shared by consecutive chunks")
    min_chunk_size: int = Field(default=100, ge=1, description="Smallest chunk a snap may produce")
    max_chunk_size: int = Field(default=1200, gt=0, description="Largest chunk a snap may produce")

    sentence_window_back: int = Field(default=200, ge=0)
    sentence_window_forward: int = Field(default=50, ge=0)
    paragraph_window_back: int = Field(default=300, ge=0)
    paragraph_window_forward: int = Field(default=100, ge=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "ChunkingSettings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        if self.max_chunk_size < self.chunk_size:
            raise ValueError("max_chunk_size must be at least chunk_size")
        return self
