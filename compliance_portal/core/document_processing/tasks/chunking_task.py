"""
Text chunking task using EnhancedChunker.

Splits extracted text into offset-exact chunks with page numbers taken
from the extractor's page spans.

Dependencies: compliance_portal.core.document_processing.chunking
System role: Second stage of document ingestion pipeline
"""

from compliance_portal.core.document_processing.chunking import EnhancedChunker
from compliance_portal.core.document_processing.models import EnhancedChunk, ExtractionResult


class ChunkingTask:
    """Split extracted documents into chunks."""

    def __init__(self, chunker: EnhancedChunker | None = None) -> None:
        """
        Initialize chunking task.

        Args:
            chunker: Chunker instance (default settings if None)
        """
        self._chunker = chunker or EnhancedChunker()

    def chunk(self, extraction: ExtractionResult) -> list[EnhancedChunk]:
        """
        Split extracted text into chunks.

        Args:
            extraction: Extractor output; ``extraction.text`` is the content
                the chunk offsets index into

        Returns:
            list[EnhancedChunk]: Chunks in index order
        """
        return self._chunker.chunk(extraction.text, extraction.pages)
