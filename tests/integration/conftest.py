"""
Fixtures for pipeline, retrieval and consistency integration tests.

Provides: scripted extractor, three-page regulatory text, pipeline factory
Dependencies: pytest
System role: Integration test infrastructure
"""

import pytest

from compliance_portal.configs.chunking import ChunkingSettings
from compliance_portal.configs.ingestion import IngestionSettings
from compliance_portal.core.document_processing.chunking import EnhancedChunker
from compliance_portal.core.document_processing.entrypoint import IngestionPipeline
from compliance_portal.core.document_processing.models import (
    ExtractionMetadata,
    ExtractionResult,
    IngestionSource,
    PageText,
)
from compliance_portal.core.exceptions import ExtractionError


def sentence(i: int, topic: str = "operator licensing duties") -> str:
    """A 100-character sentence ending in '. '."""
    body = f"Sentence {i:02d} sets out {topic}"
    return body.ljust(98, "x") + ". "


def paged_result(text: str, page_size: int = 1500) -> ExtractionResult:
    """Extraction result whose pages are adjacent slices of ``text``."""
    pages = [
        PageText(
            page_number=n + 1,
            text=text[start:start + page_size],
            start_char=start,
            end_char=min(start + page_size, len(text)),
        )
        for n, start in enumerate(range(0, len(text), page_size))
    ]
    return ExtractionResult(
        text=text,
        pages=pages,
        metadata=ExtractionMetadata(method="pymupdf", total_pages=len(pages)),
    )


class ScriptedExtractor:
    """Returns queued results (or raises queued errors) in order."""

    def __init__(self, *outcomes: ExtractionResult | Exception) -> None:
        self._outcomes = list(outcomes)
        self.sources: list[IngestionSource] = []

    async def extract(self, source: IngestionSource) -> ExtractionResult:
        self.sources.append(source)
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def three_page_text() -> str:
    """4500 characters: 45 sentences over three 1500-character pages."""
    return "".join(sentence(i) for i in range(45))


@pytest.fixture
def pdf_source() -> IngestionSource:
    return IngestionSource(file_bytes=b"%PDF-1.7 stub", filename="rules.pdf", content_type="application/pdf")


@pytest.fixture
def make_pipeline(session_factory, vector_client):
    """Build a pipeline around the given extractor (and optional overrides)."""

    def factory(extractor, client=None, status_updater=None, **settings) -> IngestionPipeline:
        values = {"progress_batch_size": 1, "embedding_concurrency": 2}
        values.update(settings)
        return IngestionPipeline(
            session_factory=session_factory,
            extractor=extractor,
            vector_client=client or vector_client,
            chunker=EnhancedChunker(ChunkingSettings(chunk_size=1000, context_radius=200)),
            settings=IngestionSettings(**values),
            status_updater=status_updater,
        )

    return factory


@pytest.fixture
def extraction_failure() -> ExtractionError:
    return ExtractionError("PyMuPDF could not read PDF: broken xref", source_type="pdf")


@pytest.fixture
def make_text():
    """Factory for ``count`` 100-character sentences about ``topic``."""

    def factory(count: int, topic: str = "operator licensing duties") -> str:
        return "".join(sentence(i, topic) for i in range(count))

    return factory


@pytest.fixture
def paged():
    return paged_result


@pytest.fixture
def scripted():
    """The ScriptedExtractor class, for building extractors inline."""
    return ScriptedExtractor


@pytest.fixture
def ingest(make_pipeline, create_document, pdf_source):
    """Create a document and run it through the pipeline with the given text."""

    async def factory(text: str, state: str | None = "CO", title: str = "Sports Wagering Rules", **fields):
        document = await create_document(title=title, state=state, **fields)
        result = await make_pipeline(ScriptedExtractor(paged_result(text))).process(document.id, pdf_source)
        assert result.status.value == "COMPLETED"
        return document

    return factory
