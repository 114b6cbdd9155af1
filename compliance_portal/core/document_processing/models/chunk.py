"""
Chunk domain model for the ingestion pipeline.

An EnhancedChunk is a contiguous, offset-addressable span of a document's
extracted text plus prompt-only context on either side.

Dependencies: pydantic
System role: Data structure passed from the chunker to the indexing task
"""

import enum

from pydantic import BaseModel, Field, computed_field


class ChunkType(str, enum.Enum):
    """Dominant structure of a chunk's text."""

    PARAGRAPH = "paragraph"
    SECTION_HEADER = "section_header"
    LIST_ITEM = "list_item"
    TABLE = "table"
    MIXED = "mixed"


def vector_id(document_id: str, chunk_index: int) -> str:
    """Vector index key for a chunk."""
    return f"{document_id}_chunk_{chunk_index}"


class EnhancedChunk(BaseModel):
    """
    Citation-safe chunk.

    ``text`` always equals ``source[original_start_char:original_end_char]``.
    Context fields are stored separately and never merged into ``text``.
    """

    chunk_index: int = Field(ge=0, description="Zero-based position in the document")
    text: str = Field(description="Exact source substring")
    original_start_char: int = Field(ge=0, description="Inclusive start offset into Document.content")
    original_end_char: int = Field(ge=0, description="Exclusive end offset into Document.content")
    context_before: str = Field(default="", description="Text immediately before the chunk")
    context_after: str = Field(default="", description="Text immediately after the chunk")
    page_number: int = Field(default=1, ge=1, description="Page containing the chunk start")
    section_title: str | None = Field(default=None, description="Nearest preceding markdown header")
    chunk_type: ChunkType = Field(default=ChunkType.PARAGRAPH)

    @computed_field
    @property
    def length(self) -> int:
        return self.original_end_char - self.original_start_char
