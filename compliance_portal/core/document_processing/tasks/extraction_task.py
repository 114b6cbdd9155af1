"""
Text extraction task.

Runs the configured extractor for a source and rejects empty output, so
the pipeline only ever persists usable content.

Dependencies: compliance_portal.boundary.extraction
System role: First stage of document ingestion pipeline
"""

import logging

from compliance_portal.boundary.extraction.base import TextExtractor
from compliance_portal.core.document_processing.models import ExtractionResult, IngestionSource
from compliance_portal.core.exceptions import ExtractionError

logger = logging.getLogger(__name__)


class ExtractionTask:
    """Extract document text from file bytes or a URL."""

    def __init__(self, extractor: TextExtractor) -> None:
        self._extractor = extractor

    async def extract(self, source: IngestionSource, document_id: str) -> ExtractionResult:
        """
        Extract text for one document.

        Args:
            source: File bytes or URL
            document_id: Document being processed (for errors and logs)

        Returns:
            ExtractionResult: Non-empty text with page spans

        Raises:
            ExtractionError: Extraction failed or produced no text
        """
        try:
            result = await self._extractor.extract(source)
        except ExtractionError as e:
            e.details.setdefault("document_id", document_id)
            raise
        except Exception as e:
            raise ExtractionError(
                f"Failed to extract text: {e}",
                document_id=document_id,
            ) from e

        if not result.text.strip():
            raise ExtractionError(
                "Document contains no extractable text",
                document_id=document_id,
                source_type=result.metadata.method,
            )

        logger.info(
            f"{__name__}:extract - SUCCESS",
            extra={
                "document_id": document_id,
                "method": result.metadata.method,
                "pages": result.metadata.total_pages,
                "chars": len(result.text),
            },
        )
        return result
