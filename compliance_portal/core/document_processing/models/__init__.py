"""
Models for the document processing pipeline.

Exports: EnhancedChunk, ChunkType, ExtractionResult, PageText, PipelineResult,
IngestionSource, IngestionStatus
"""

from .chunk import ChunkType, EnhancedChunk, vector_id
from .extraction import (
    ExtractionMetadata,
    ExtractionResult,
    PageText,
    TextCoordinates,
    join_pages,
)
from .pipeline_result import IngestionSource, IngestionStatus, PipelineResult

__all__ = [
    "ChunkType",
    "EnhancedChunk",
    "vector_id",
    "ExtractionMetadata",
    "ExtractionResult",
    "PageText",
    "TextCoordinates",
    "join_pages",
    "IngestionSource",
    "IngestionStatus",
    "PipelineResult",
]
