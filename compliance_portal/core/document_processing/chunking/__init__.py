"""Citation-safe chunking."""

from .enhanced_chunker import EnhancedChunker, classify_chunk

__all__ = ["EnhancedChunker", "classify_chunk"]
