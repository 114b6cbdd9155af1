"""
Orphaned vector detection and cleanup.

An orphan is a vector whose documentId has no row in the document store
(left behind by a delete that did not cascade, or a delete/ingest race).
Detection is read-only; cleanup deletes in bounded batches and re-scans.

Dependencies: sqlalchemy, compliance_portal.boundary
System role: Batch repair job for vector/document consistency
"""

import logging

from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from compliance_portal.boundary.db.CRUD.document_crud import document_crud
from compliance_portal.boundary.vdb.vector_store_client import VectorStoreClient

logger = logging.getLogger(__name__)


class OrphanReport(BaseModel):
    """Result of one scan."""

    scanned_vectors: int = 0
    valid_document_ids: list[str] = Field(default_factory=list)
    orphans_by_document: dict[str, list[str]] = Field(default_factory=dict)

    @property
    def orphan_vector_ids(self) -> list[str]:
        return [vid for ids in self.orphans_by_document.values() for vid in ids]

    @property
    def orphan_count(self) -> int:
        return sum(len(ids) for ids in self.orphans_by_document.values())


class CleanupResult(BaseModel):
    """Outcome of a cleanup run."""

    dry_run: bool
    found: int
    deleted: int = 0
    remaining: int = 0
    orphan_document_ids: list[str] = Field(default_factory=list)


class OrphanDetector:
    """Find and remove vectors that belong to deleted documents."""

    def __init__(
        self,
        vector_client: VectorStoreClient,
        session_factory: async_sessionmaker[AsyncSession],
        delete_batch_size: int = 100,
    ) -> None:
        self._vector_client = vector_client
        self._session_factory = session_factory
        self._batch_size = max(1, delete_batch_size)

    async def detect(self) -> OrphanReport:
        """Scan every vector and group orphan ids by their missing document."""
        entries = await self._vector_client.list_entries()
        async with self._session_factory() as session:
            valid_ids = await document_crud.list_ids(session)

        report = OrphanReport(scanned_vectors=len(entries))
        seen_valid: set[str] = set()
        for entry in entries:
            doc_id = entry.metadata.get("documentId")
            if doc_id in valid_ids:
                seen_valid.add(doc_id)
                continue
            key = doc_id or "<missing documentId>"
            report.orphans_by_document.setdefault(key, []).append(entry.id)
        report.valid_document_ids = sorted(seen_valid)

        logger.info(
            f"{__name__}:detect - SUCCESS",
            extra={
                "scanned": report.scanned_vectors,
                "orphans": report.orphan_count,
                "orphan_documents": len(report.orphans_by_document),
            },
        )
        return report

    async def cleanup(self, dry_run: bool = True) -> CleanupResult:
        """
        Delete orphaned vectors in batches, then verify with a fresh scan.

        Args:
            dry_run: Report only, delete nothing

        Returns:
            CleanupResult: Counts before and after
        """
        report = await self.detect()
        result = CleanupResult(
            dry_run=dry_run,
            found=report.orphan_count,
            orphan_document_ids=sorted(report.orphans_by_document),
        )
        if dry_run or not report.orphan_count:
            result.remaining = report.orphan_count
            return result

        ids = report.orphan_vector_ids
        for offset in range(0, len(ids), self._batch_size):
            batch = ids[offset:offset + self._batch_size]
            await self._vector_client.delete_ids(batch)
            result.deleted += len(batch)
            logger.info(
                f"{__name__}:cleanup - Deleted batch",
                extra={"batch": offset // self._batch_size + 1, "size": len(batch)},
            )

        verification = await self.detect()
        result.remaining = verification.orphan_count
        if result.remaining:
            logger.warning(
                f"{__name__}:cleanup - Orphans remain after cleanup",
                extra={"remaining": result.remaining},
            )
        return result
