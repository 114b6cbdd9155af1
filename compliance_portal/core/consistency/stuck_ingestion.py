"""
Stuck ingestion detection.

Ingestion is never cancelled in flight. Documents sitting in UPLOADED or
EXTRACTING past a timeout are found here and marked FAILED by an operator
or a scheduled job.

Dependencies: sqlalchemy, compliance_portal.boundary.db
System role: Batch repair job for abandoned ingestions
"""

import logging
import uuid
from datetime import datetime, timedelta

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from compliance_portal.boundary.db.base import utcnow
from compliance_portal.boundary.db.CRUD.document_crud import document_crud
from compliance_portal.boundary.db.models.document_model import DocumentModel, ProcessingStatus

logger = logging.getLogger(__name__)

STUCK_STATUSES = (ProcessingStatus.UPLOADED, ProcessingStatus.EXTRACTING)


class StuckDocument(BaseModel):
    document_id: str
    title: str
    status: ProcessingStatus
    minutes_stuck: float


class StuckIngestionDetector:
    """Find and fail documents whose ingestion stalled early."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_stuck(self, timeout: timedelta) -> list[StuckDocument]:
        """
        Documents in UPLOADED/EXTRACTING whose last update is older than ``timeout``.
        """
        now = utcnow()
        async with self._session_factory() as session:
            documents = await document_crud.get_by_statuses(
                session, STUCK_STATUSES, updated_before=now - timeout
            )
        return [self._describe(document, now) for document in documents]

    @staticmethod
    def _describe(document: DocumentModel, now: datetime) -> StuckDocument:
        updated = document.updated_at
        if updated.tzinfo is None:
            updated = updated.replace(tzinfo=now.tzinfo)
        return StuckDocument(
            document_id=str(document.id),
            title=document.title,
            status=document.processing_status,
            minutes_stuck=round((now - updated).total_seconds() / 60, 1),
        )

    async def mark_failed(
        self,
        timeout: timedelta,
        message: str = "Processing timed out",
        dry_run: bool = False,
    ) -> list[StuckDocument]:
        """
        Mark stuck documents FAILED.

        Args:
            timeout: Age threshold
            message: Error message recorded on each document
            dry_run: Report only

        Returns:
            list[StuckDocument]: Documents that were (or would be) failed
        """
        stuck = await self.find_stuck(timeout)
        if dry_run or not stuck:
            return stuck

        async with self._session_factory() as session:
            for item in stuck:
                document = await document_crud.get_by_id(session, uuid.UUID(item.document_id))
                if document is None or document.processing_status not in STUCK_STATUSES:
                    continue
                await document_crud.mark_failed(
                    session,
                    document.id,
                    f"{message} after {item.minutes_stuck:.0f} minutes in {item.status.value}",
                )
            await session.commit()

        logger.warning(
            f"{__name__}:mark_failed - Marked stuck documents FAILED",
            extra={"count": len(stuck), "document_ids": [s.document_id for s in stuck]},
        )
        return stuck
