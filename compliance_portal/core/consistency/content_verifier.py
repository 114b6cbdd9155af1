"""
Content-match verification.

For a sample of each document's chunk vectors, checks that the stored
chunk text equals the document content at the recorded offsets. Flags
documents whose vectors disagree with current content, e.g. after a
reprocess changed extraction but old vectors were not purged.

Dependencies: sqlalchemy, compliance_portal.boundary
System role: Batch consistency check between content and vectors
"""

import logging
from collections.abc import Sequence
from enum import Enum

from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from compliance_portal.boundary.db.CRUD.document_crud import document_crud
from compliance_portal.boundary.db.models.document_model import DocumentModel, ProcessingStatus
from compliance_portal.boundary.vdb.vector_schemas import VectorEntry
from compliance_portal.boundary.vdb.vector_store_client import VectorStoreClient

logger = logging.getLogger(__name__)


class ConsistencyVerdict(str, Enum):
    GOOD = "GOOD"
    PARTIAL = "PARTIAL"
    POOR = "POOR"
    NO_VECTORS = "NO_VECTORS"


class ChunkCheck(BaseModel):
    vector_id: str
    chunk_index: int | None = None
    matches: bool
    reason: str | None = None


class DocumentConsistencyReport(BaseModel):
    document_id: str
    title: str = ""
    vector_count: int = 0
    sampled: int = 0
    matching: int = 0
    verdict: ConsistencyVerdict
    checks: list[ChunkCheck] = Field(default_factory=list)

    @property
    def agreement(self) -> float:
        return self.matching / self.sampled if self.sampled else 0.0


class ConsistencySummary(BaseModel):
    documents_checked: int = 0
    by_verdict: dict[ConsistencyVerdict, int] = Field(default_factory=dict)
    reports: list[DocumentConsistencyReport] = Field(default_factory=list)


def verdict_for(matching: int, sampled: int) -> ConsistencyVerdict:
    """GOOD above 80% agreement, PARTIAL above 50%, otherwise POOR."""
    if sampled == 0:
        return ConsistencyVerdict.NO_VECTORS
    ratio = matching / sampled
    if ratio > 0.8:
        return ConsistencyVerdict.GOOD
    if ratio > 0.5:
        return ConsistencyVerdict.PARTIAL
    return ConsistencyVerdict.POOR


def check_entry(content: str, entry: VectorEntry) -> ChunkCheck:
    meta = entry.metadata
    start, end = meta.get("originalStartChar"), meta.get("originalEndChar")
    chunk_text = meta.get("chunkText")
    check = ChunkCheck(vector_id=entry.id, chunk_index=meta.get("chunkIndex"), matches=False)
    if start is None or end is None or chunk_text is None:
        check.reason = "missing offsets or chunk text"
    elif not (0 <= start <= end <= len(content)):
        check.reason = f"offsets {start}-{end} outside content of length {len(content)}"
    elif content[start:end] != chunk_text:
        check.reason = "text differs at recorded offsets"
    else:
        check.matches = True
    return check


def sample_entries(entries: Sequence[VectorEntry], sample_size: int) -> list[VectorEntry]:
    """Evenly spaced sample across chunk order (deterministic)."""
    ordered = sorted(entries, key=lambda e: (e.metadata.get("chunkIndex", 0), e.id))
    if len(ordered) <= sample_size:
        return ordered
    step = len(ordered) / sample_size
    return [ordered[int(i * step)] for i in range(sample_size)]


class ContentVerifier:
    """Compare indexed chunk text with stored document content."""

    def __init__(
        self,
        vector_client: VectorStoreClient,
        session_factory: async_sessionmaker[AsyncSession],
        sample_size: int = 5,
    ) -> None:
        self._vector_client = vector_client
        self._session_factory = session_factory
        self._sample_size = max(1, sample_size)

    async def verify_document(self, document: DocumentModel) -> DocumentConsistencyReport:
        """
        Verify one document.

        Args:
            document: Document row (content may be None)

        Returns:
            DocumentConsistencyReport: Sampled checks and verdict
        """
        doc_id = str(document.id)
        entries = await self._vector_client.list_entries({"documentId": {"$eq": doc_id}})
        sample = sample_entries(entries, self._sample_size)
        content = document.content or ""
        checks = [check_entry(content, entry) for entry in sample]
        matching = sum(1 for check in checks if check.matches)
        report = DocumentConsistencyReport(
            document_id=doc_id,
            title=document.title,
            vector_count=len(entries),
            sampled=len(sample),
            matching=matching,
            verdict=verdict_for(matching, len(sample)),
            checks=checks,
        )
        if report.verdict in (ConsistencyVerdict.PARTIAL, ConsistencyVerdict.POOR):
            logger.warning(
                f"{__name__}:verify_document - Content mismatch",
                extra={"document_id": doc_id, "matching": matching, "sampled": len(sample)},
            )
        return report

    async def verify_all(self, limit: int | None = None) -> ConsistencySummary:
        """Verify every COMPLETED document (optionally the newest ``limit``)."""
        async with self._session_factory() as session:
            documents = await document_crud.list_documents(
                session,
                limit=limit,
                status=ProcessingStatus.COMPLETED,
            )

        summary = ConsistencySummary()
        for document in documents:
            report = await self.verify_document(document)
            summary.reports.append(report)
            summary.by_verdict[report.verdict] = summary.by_verdict.get(report.verdict, 0) + 1
        summary.documents_checked = len(summary.reports)

        logger.info(
            f"{__name__}:verify_all - SUCCESS",
            extra={
                "documents": summary.documents_checked,
                "by_verdict": {k.value: v for k, v in summary.by_verdict.items()},
            },
        )
        return summary
