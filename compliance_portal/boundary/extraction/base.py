"""
Text extractor contract.

Dependencies: compliance_portal.core.document_processing.models
System role: Strategy interface for turning raw sources into text
"""

from typing import Protocol, runtime_checkable

from compliance_portal.core.document_processing.models import ExtractionResult, IngestionSource


@runtime_checkable
class TextExtractor(Protocol):
    """Turns an ingestion source into joined text with page spans."""

    async def extract(self, source: IngestionSource) -> ExtractionResult:
        """
        Extract text from the source.

        Raises:
            ExtractionError: The source could not be read
        """
        ...
