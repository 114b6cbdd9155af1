"""
PDF text extractors.

PyMuPDFExtractor is the primary extractor and records block coordinates.
PyPDFExtractor is the fallback for files PyMuPDF rejects or reads as empty.
Both join pages with a fixed separator so page spans index the joined text.

Dependencies: pymupdf (fitz), pypdf, fastapi.concurrency
System role: First stage of document ingestion pipeline (PDF sources)
"""

import io
import logging

import fitz
from fastapi.concurrency import run_in_threadpool
from pypdf import PdfReader

from compliance_portal.core.document_processing.models import (
    ExtractionResult,
    IngestionSource,
    TextCoordinates,
    join_pages,
)
from compliance_portal.core.exceptions import ExtractionError

logger = logging.getLogger(__name__)


def _require_bytes(source: IngestionSource) -> bytes:
    if not source.file_bytes:
        raise ExtractionError("PDF source has no bytes", source_type="pdf")
    return source.file_bytes


class PyMuPDFExtractor:
    """Extract text and block coordinates with PyMuPDF."""

    method = "pymupdf"

    def _extract_sync(self, data: bytes) -> ExtractionResult:
        page_texts: list[str] = []
        coordinates: list[list[TextCoordinates]] = []
        with fitz.open(stream=data, filetype="pdf") as doc:
            title = (doc.metadata or {}).get("title") or None
            for page in doc:
                page_texts.append(page.get_text("text"))
                boxes = []
                # (x0, y0, x1, y1, text, block_no, block_type); type 0 is text
                for x0, y0, x1, y1, _text, _no, block_type in page.get_text("blocks"):
                    if block_type == 0:
                        boxes.append(TextCoordinates(x=x0, y=y0, width=x1 - x0, height=y1 - y0))
                coordinates.append(boxes)
        return join_pages(page_texts, self.method, coordinates=coordinates, title=title)

    async def extract(self, source: IngestionSource) -> ExtractionResult:
        data = _require_bytes(source)
        try:
            result = await run_in_threadpool(self._extract_sync, data)
        except Exception as e:
            raise ExtractionError(
                f"PyMuPDF could not read PDF: {e}",
                source_type="pdf",
                details={"filename": source.filename},
            ) from e
        logger.info(
            f"{__name__}:PyMuPDFExtractor.extract - SUCCESS",
            extra={"pages": result.metadata.total_pages, "chars": len(result.text)},
        )
        return result


class PyPDFExtractor:
    """Extract text with pypdf (no coordinates)."""

    method = "pypdf"

    def _extract_sync(self, data: bytes) -> ExtractionResult:
        reader = PdfReader(io.BytesIO(data))
        page_texts = [page.extract_text() or "" for page in reader.pages]
        title = reader.metadata.title if reader.metadata else None
        return join_pages(page_texts, self.method, title=title or None)

    async def extract(self, source: IngestionSource) -> ExtractionResult:
        data = _require_bytes(source)
        try:
            result = await run_in_threadpool(self._extract_sync, data)
        except Exception as e:
            raise ExtractionError(
                f"pypdf could not read PDF: {e}",
                source_type="pdf",
                details={"filename": source.filename},
            ) from e
        logger.info(
            f"{__name__}:PyPDFExtractor.extract - SUCCESS",
            extra={"pages": result.metadata.total_pages, "chars": len(result.text)},
        )
        return result
