"""
Markdown and plain-text extractor.

Decodes the bytes directly; the whole file is a single page. The first
markdown header, if any, becomes the extracted title.

Dependencies: compliance_portal.core.document_processing.models
System role: First stage of document ingestion pipeline (text sources)
"""

import re

from compliance_portal.core.document_processing.models import (
    ExtractionResult,
    IngestionSource,
    join_pages,
)
from compliance_portal.core.exceptions import ExtractionError

_FIRST_HEADER = re.compile(r"^#{1,6}\s+(.+?)\s*#*\s*$", re.MULTILINE)


def decode_text(data: bytes) -> str:
    """Decode UTF-8 (with or without BOM), falling back to Latin-1."""
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = data.decode("latin-1")
    return text.replace("\r\n", "\n").replace("\r", "\n")


class PlainTextExtractor:
    """Extract markdown or plain text files."""

    def __init__(self, method: str = "markdown") -> None:
        self.method = method

    async def extract(self, source: IngestionSource) -> ExtractionResult:
        if source.file_bytes is None:
            raise ExtractionError("Text source has no bytes", source_type=self.method)
        text = decode_text(source.file_bytes)
        header = _FIRST_HEADER.search(text)
        return join_pages([text], self.method, title=header.group(1) if header else None)
