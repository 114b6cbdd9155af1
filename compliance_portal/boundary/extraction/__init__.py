"""
Text extraction boundary.

- PyMuPDFExtractor / PyPDFExtractor: PDF primary and fallback
- PlainTextExtractor: markdown and plain text
- UrlExtractor: httpx fetch of public hosts, BeautifulSoup text extraction
- build_extractor(): routing chain used by the pipeline
"""

from compliance_portal.boundary.extraction.base import TextExtractor
from compliance_portal.boundary.extraction.fallback_extractor import (
    FallbackExtractor,
    SourceRoutingExtractor,
    build_extractor,
)
from compliance_portal.boundary.extraction.pdf_extractors import PyMuPDFExtractor, PyPDFExtractor
from compliance_portal.boundary.extraction.text_extractor import PlainTextExtractor
from compliance_portal.boundary.extraction.url_extractor import UrlExtractor

__all__ = [
    "FallbackExtractor",
    "PlainTextExtractor",
    "PyMuPDFExtractor",
    "PyPDFExtractor",
    "SourceRoutingExtractor",
    "TextExtractor",
    "UrlExtractor",
    "build_extractor",
]
