"""
Task modules for document processing pipeline.

Exports: ExtractionTask, ChunkingTask, IndexingTask
"""

from .chunking_task import ChunkingTask
from .extraction_task import ExtractionTask
from .indexing_task import DocumentFields, IndexingOutcome, IndexingTask, build_chunk_metadata

__all__ = [
    "ExtractionTask",
    "ChunkingTask",
    "IndexingTask",
    "IndexingOutcome",
    "DocumentFields",
    "build_chunk_metadata",
]
