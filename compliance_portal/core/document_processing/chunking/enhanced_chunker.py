"""
Enhanced chunker.

Splits extracted document text into citation-safe chunks. Every chunk's
text is the exact source slice at its recorded offsets; boundaries snap to
paragraph breaks, then sentence ends, then fall back to a hard cut. Context
around each chunk is kept in separate fields for prompt construction.

Dependencies: re, bisect, compliance_portal.configs.chunking
System role: Second stage of document ingestion pipeline (pure, synchronous)
"""

import bisect
import re
from collections.abc import Sequence

from compliance_portal.configs.chunking import ChunkingSettings
from compliance_portal.core.document_processing.models import (
    ChunkType,
    EnhancedChunk,
    PageText,
)

PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
SENTENCE_END = re.compile(r"[.!?]+[\"')\]]*\s+")
MARKDOWN_HEADER = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$", re.MULTILINE)

_LIST_LINE = re.compile(r"^\s*(?:[-*+•]|\d+[.)])\s+")
_TABLE_LINE = re.compile(r"^\s*\|.*\|\s*$")


def classify_block(block: str) -> ChunkType:
    """
    Classify one paragraph-sized block of text.

    Args:
        block: Text without blank lines

    Returns:
        ChunkType: section_header, list_item, table or paragraph
    """
    stripped = block.strip()
    if MARKDOWN_HEADER.match(stripped):
        return ChunkType.SECTION_HEADER
    lines = [line for line in stripped.splitlines() if line.strip()]
    if lines and all(_LIST_LINE.match(line) for line in lines):
        return ChunkType.LIST_ITEM
    if lines and sum(1 for line in lines if _TABLE_LINE.match(line)) * 2 >= len(lines):
        return ChunkType.TABLE
    return ChunkType.PARAGRAPH


def classify_chunk(text: str) -> ChunkType:
    """Classify a chunk as the shared type of its blocks, or mixed."""
    kinds = {classify_block(block) for block in PARAGRAPH_BREAK.split(text) if block.strip()}
    if not kinds:
        return ChunkType.PARAGRAPH
    if len(kinds) == 1:
        return kinds.pop()
    return ChunkType.MIXED


class EnhancedChunker:
    """Split text into overlapping-context, offset-exact chunks."""

    def __init__(self, settings: ChunkingSettings | None = None) -> None:
        """
        Initialize chunker.

        Args:
            settings: Chunking settings (defaults loaded from environment if None)
        """
        self._settings = settings or ChunkingSettings()

    @property
    def settings(self) -> ChunkingSettings:
        return self._settings

    def chunk(
        self,
        text: str,
        pages: Sequence[PageText] | None = None,
    ) -> list[EnhancedChunk]:
        """
        Chunk document text.

        Args:
            text: Full extracted document text (the canonical Document.content)
            pages: Optional page spans indexing into ``text``

        Returns:
            list[EnhancedChunk]: Chunks in index order; empty for empty text
        """
        if not text:
            return []

        cfg = self._settings
        n = len(text)
        headers = [(m.start(), m.group(2).strip()) for m in MARKDOWN_HEADER.finditer(text)]
        header_starts = [pos for pos, _ in headers]
        page_spans = sorted(pages or [], key=lambda p: p.start_char)
        page_starts = [p.start_char for p in page_spans]

        chunks: list[EnhancedChunk] = []
        start = 0
        while start < n:
            end = self._find_end(text, start)
            chunk_text = text[start:end]
            chunks.append(
                EnhancedChunk(
                    chunk_index=len(chunks),
                    text=chunk_text,
                    original_start_char=start,
                    original_end_char=end,
                    context_before=text[max(0, start - cfg.context_radius):start],
                    context_after=text[end:end + cfg.context_radius],
                    page_number=self._page_for(start, page_spans, page_starts),
                    section_title=self._section_for(start, end, headers, header_starts),
                    chunk_type=classify_chunk(chunk_text),
                )
            )
            if end >= n:
                break
            next_start = end - cfg.chunk_overlap
            start = next_start if next_start > start else end

        return chunks

    def _find_end(self, text: str, start: int) -> int:
        """Pick the committed end offset for a chunk starting at ``start``."""
        cfg = self._settings
        n = len(text)
        target = start + cfg.chunk_size
        if target >= n:
            return n

        end = target
        snapped = None
        if cfg.preserve_paragraphs:
            snapped = self._nearest_boundary(
                text,
                PARAGRAPH_BREAK,
                start,
                target,
                cfg.paragraph_window_back,
                cfg.paragraph_window_forward,
            )
        if snapped is None and cfg.preserve_sentences:
            snapped = self._nearest_boundary(
                text,
                SENTENCE_END,
                start,
                target,
                cfg.sentence_window_back,
                cfg.sentence_window_forward,
            )
        if snapped is not None:
            end = snapped

        # Absorb a short tail rather than emitting a sliver chunk
        remaining = n - end
        if 0 < remaining < cfg.min_chunk_size and n - start <= cfg.max_chunk_size:
            return n
        return end

    def _nearest_boundary(
        self,
        text: str,
        pattern: re.Pattern[str],
        start: int,
        target: int,
        back: int,
        forward: int,
    ) -> int | None:
        """
        Find the boundary (match end) closest to ``target`` inside the window.

        Returns:
            int | None: Offset just past the boundary, or None if none qualifies
        """
        cfg = self._settings
        lo = max(start + cfg.min_chunk_size, target - back)
        hi = min(len(text), target + forward, start + cfg.max_chunk_size)
        if lo > hi:
            return None

        best: int | None = None
        for match in pattern.finditer(text, start, hi):
            boundary = match.end()
            if boundary < lo:
                continue
            if best is None or abs(boundary - target) < abs(best - target):
                best = boundary
        return best

    @staticmethod
    def _page_for(
        offset: int,
        page_spans: Sequence[PageText],
        page_starts: list[int],
    ) -> int:
        if not page_spans:
            return 1
        idx = bisect.bisect_right(page_starts, offset) - 1
        if idx < 0:
            return page_spans[0].page_number
        return page_spans[idx].page_number

    @staticmethod
    def _section_for(
        start: int,
        end: int,
        headers: list[tuple[int, str]],
        header_starts: list[int],
    ) -> str | None:
        if not headers:
            return None
        idx = bisect.bisect_right(header_starts, start) - 1
        if idx >= 0:
            return headers[idx][1]
        # No header before the chunk; use one that opens inside it
        first_pos, first_title = headers[0]
        if first_pos < end:
            return first_title
        return None
