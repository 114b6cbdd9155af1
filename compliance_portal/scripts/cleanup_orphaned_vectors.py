"""
Orphaned vector cleanup utility.

Usage:
    python -m compliance_portal.scripts.cleanup_orphaned_vectors            # dry run
    python -m compliance_portal.scripts.cleanup_orphaned_vectors --execute  # delete

Purpose:
- Enumerate every vector in the namespace
- Group by documentId and compare against rows in the documents table
- Delete vectors whose document no longer exists (only with --execute)

Dependencies: compliance_portal.application.services
System role: Operator tool for vector/database drift
"""

import argparse
import asyncio
import sys

from compliance_portal.api.deps.dependencies import ServiceCache
from compliance_portal.core.exceptions import VectorStoreError
from compliance_portal.observability.logger import configure_logging, get_logger

logger = get_logger(__name__)


async def run(execute: bool) -> int:
    service = ServiceCache().consistency_service
    report = await service.detect_orphans()
    logger.info(
        f"Scanned {report.scanned_vectors} vectors, "
        f"{len(report.valid_document_ids)} valid documents, "
        f"{report.orphan_count} orphaned vectors"
    )
    for document_id, vector_ids in sorted(report.orphans_by_document.items()):
        logger.info(f"  orphan document {document_id}: {len(vector_ids)} vectors")

    if not report.orphan_count:
        return 0

    result = await service.cleanup_orphans(dry_run=not execute)
    if result.dry_run:
        logger.info("Dry run: nothing deleted. Re-run with --execute to delete.")
        return 0

    logger.info(f"Deleted {result.deleted} vectors, {result.remaining} remaining")
    return 0 if result.remaining == 0 else 1


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Find and delete orphaned vectors")
    parser.add_argument("--execute", action="store_true", help="Delete orphans (default is a dry run)")
    args = parser.parse_args()

    configure_logging()
    try:
        sys.exit(asyncio.run(run(args.execute)))
    except VectorStoreError as e:
        logger.error(f"Vector store unavailable: {e}")
        sys.exit(2)


if __name__ == "__main__":
    main()
