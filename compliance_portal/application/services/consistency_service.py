"""
Consistency service.

Entry point for the repair tooling used by the maintenance API and the
command-line scripts.

Dependencies: compliance_portal.core.consistency
System role: Consistency and repair orchestration
"""

from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from compliance_portal.boundary.vdb.vector_store_client import VectorStoreClient
from compliance_portal.configs.ingestion import IngestionSettings
from compliance_portal.core.consistency import (
    CleanupResult,
    ConsistencySummary,
    ContentVerifier,
    OrphanDetector,
    OrphanReport,
    StuckDocument,
    StuckIngestionDetector,
)


class ConsistencyService:
    """Orphan cleanup, content verification and stuck-ingestion repair."""

    def __init__(
        self,
        vector_client: VectorStoreClient,
        session_factory: async_sessionmaker[AsyncSession],
        settings: IngestionSettings | None = None,
        delete_batch_size: int = 100,
        sample_size: int = 5,
    ) -> None:
        self._settings = settings or IngestionSettings()
        self.orphans = OrphanDetector(vector_client, session_factory, delete_batch_size)
        self.content = ContentVerifier(vector_client, session_factory, sample_size)
        self.stuck = StuckIngestionDetector(session_factory)

    async def detect_orphans(self) -> OrphanReport:
        return await self.orphans.detect()

    async def cleanup_orphans(self, dry_run: bool = True) -> CleanupResult:
        return await self.orphans.cleanup(dry_run=dry_run)

    async def verify_content(self, limit: int | None = None) -> ConsistencySummary:
        return await self.content.verify_all(limit=limit)

    async def fail_stuck_documents(
        self,
        timeout_minutes: int | None = None,
        dry_run: bool = False,
    ) -> list[StuckDocument]:
        minutes = timeout_minutes or self._settings.stuck_timeout_minutes
        return await self.stuck.mark_failed(timedelta(minutes=minutes), dry_run=dry_run)
