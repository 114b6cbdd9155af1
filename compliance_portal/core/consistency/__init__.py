"""Consistency and repair tooling: orphans, content-match, stuck ingestions."""

from compliance_portal.core.consistency.content_verifier import (
    ConsistencySummary,
    ConsistencyVerdict,
    ContentVerifier,
    DocumentConsistencyReport,
)
from compliance_portal.core.consistency.orphan_detector import (
    CleanupResult,
    OrphanDetector,
    OrphanReport,
)
from compliance_portal.core.consistency.stuck_ingestion import StuckDocument, StuckIngestionDetector

__all__ = [
    "CleanupResult",
    "ConsistencySummary",
    "ConsistencyVerdict",
    "ContentVerifier",
    "DocumentConsistencyReport",
    "OrphanDetector",
    "OrphanReport",
    "StuckDocument",
    "StuckIngestionDetector",
]
