"""
Fallback and routing extractors.

FallbackExtractor tries a primary extractor and falls back on error or on
empty text. SourceRoutingExtractor picks the extractor for a source from
its URL, filename suffix or content type.

Dependencies: compliance_portal.boundary.extraction, compliance_portal.configs
System role: Extractor composition used by the ingestion pipeline
"""

import logging
from pathlib import PurePosixPath

from compliance_portal.boundary.extraction.base import TextExtractor
from compliance_portal.boundary.extraction.pdf_extractors import PyMuPDFExtractor, PyPDFExtractor
from compliance_portal.boundary.extraction.text_extractor import PlainTextExtractor
from compliance_portal.boundary.extraction.url_extractor import UrlExtractor
from compliance_portal.configs.ingestion import IngestionSettings
from compliance_portal.core.document_processing.models import ExtractionResult, IngestionSource
from compliance_portal.core.exceptions import ExtractionError

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = {".md", ".markdown", ".txt", ".text"}


class FallbackExtractor:
    """Primary extractor with a secondary used on failure or empty output."""

    def __init__(self, primary: TextExtractor, fallback: TextExtractor) -> None:
        self.primary = primary
        self.fallback = fallback

    async def extract(self, source: IngestionSource) -> ExtractionResult:
        try:
            result = await self.primary.extract(source)
            if result.text.strip():
                return result
            logger.warning(
                f"{__name__}:extract - Primary returned no text, trying fallback",
                extra={"source_filename": source.filename},
            )
        except ExtractionError as e:
            logger.warning(
                f"{__name__}:extract - Primary failed, trying fallback: {e.message}",
                extra={"source_filename": source.filename},
            )

        result = await self.fallback.extract(source)
        if not result.text.strip():
            raise ExtractionError(
                "Document contains no extractable text",
                details={"filename": source.filename},
            )
        return result


class SourceRoutingExtractor:
    """Dispatch to the URL, text or PDF extractor for each source."""

    def __init__(
        self,
        pdf: TextExtractor,
        text: TextExtractor,
        url: TextExtractor,
    ) -> None:
        self.pdf = pdf
        self.text = text
        self.url = url

    def route(self, source: IngestionSource) -> TextExtractor:
        if source.url:
            return self.url
        suffix = PurePosixPath(source.filename or "").suffix.lower()
        content_type = (source.content_type or "").lower()
        if suffix == ".pdf" or content_type == "application/pdf":
            return self.pdf
        if suffix in TEXT_SUFFIXES or content_type.startswith("text/"):
            return self.text
        raise ExtractionError(
            f"Unsupported file type: {suffix or content_type or 'unknown'}",
            source_type=suffix or content_type or None,
        )

    async def extract(self, source: IngestionSource) -> ExtractionResult:
        return await self.route(source).extract(source)


def build_extractor(settings: IngestionSettings | None = None) -> SourceRoutingExtractor:
    """Assemble the default extractor chain."""
    settings = settings or IngestionSettings()
    pdf = FallbackExtractor(PyMuPDFExtractor(), PyPDFExtractor())
    return SourceRoutingExtractor(
        pdf=pdf,
        text=PlainTextExtractor(),
        url=UrlExtractor(
            pdf_extractor=pdf,
            timeout=settings.url_fetch_timeout,
            max_chars=settings.url_max_chars,
        ),
    )
