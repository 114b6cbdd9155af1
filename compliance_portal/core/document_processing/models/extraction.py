"""
Extraction result models.

Contract between text extractors and the ingestion pipeline. Page spans
map character offsets in the joined text back to source pages.

Dependencies: pydantic
System role: Extractor output schema
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class TextCoordinates(BaseModel):
    """Approximate bounding box of a text block on a page."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


class PageText(BaseModel):
    """Text of one source page and its span in the joined document text."""

    page_number: int = Field(ge=1)
    text: str
    start_char: int = Field(ge=0, description="Offset of the page's first character in the joined text")
    end_char: int = Field(ge=0, description="Exclusive end offset in the joined text")
    coordinates: list[TextCoordinates] = Field(default_factory=list)


class ExtractionMetadata(BaseModel):
    """How the text was obtained."""

    method: str = Field(description="Extractor that produced the text (pymupdf, pypdf, markdown, url)")
    total_pages: int = Field(default=1, ge=0)
    title: str | None = Field(default=None, description="Title found in the source, if any")
    extracted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ExtractionResult(BaseModel):
    """Full extraction output: joined text, per-page spans, metadata."""

    text: str
    pages: list[PageText] = Field(default_factory=list)
    metadata: ExtractionMetadata


PAGE_SEPARATOR = "\n\n"


def join_pages(
    page_texts: list[str],
    method: str,
    coordinates: list[list[TextCoordinates]] | None = None,
    title: str | None = None,
) -> ExtractionResult:
    """
    Join per-page texts into one document text with exact page spans.

    Args:
        page_texts: Text of each page, in order
        method: Extractor name recorded in metadata
        coordinates: Optional per-page coordinate lists
        title: Optional title found in the source

    Returns:
        ExtractionResult: Joined text whose page spans index into it
    """
    pages: list[PageText] = []
    parts: list[str] = []
    cursor = 0
    for i, page_text in enumerate(page_texts):
        if i > 0:
            parts.append(PAGE_SEPARATOR)
            cursor += len(PAGE_SEPARATOR)
        parts.append(page_text)
        pages.append(
            PageText(
                page_number=i + 1,
                text=page_text,
                start_char=cursor,
                end_char=cursor + len(page_text),
                coordinates=coordinates[i] if coordinates else [],
            )
        )
        cursor += len(page_text)

    return ExtractionResult(
        text="".join(parts),
        pages=pages,
        metadata=ExtractionMetadata(method=method, total_pages=len(page_texts), title=title),
    )
