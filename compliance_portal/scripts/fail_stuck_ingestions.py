"""
Stuck ingestion repair utility.

Usage:
    python -m compliance_portal.scripts.fail_stuck_ingestions --dry-run
    python -m compliance_portal.scripts.fail_stuck_ingestions --timeout-minutes 60

Marks documents left in UPLOADED or EXTRACTING longer than the timeout
(for example after a process restart) as FAILED so they can be reprocessed.

Dependencies: compliance_portal.application.services
System role: Operator tool for abandoned ingestions
"""

import argparse
import asyncio

from compliance_portal.api.deps.dependencies import ServiceCache
from compliance_portal.observability.logger import configure_logging, get_logger

logger = get_logger(__name__)


async def run(timeout_minutes: int | None, dry_run: bool) -> None:
    service = ServiceCache().consistency_service
    stuck = await service.fail_stuck_documents(timeout_minutes=timeout_minutes, dry_run=dry_run)
    for doc in stuck:
        logger.info(f"{doc.status.value:<10} {doc.document_id} stuck {doc.minutes_stuck:.0f} min: {doc.title}")
    verb = "Would mark" if dry_run else "Marked"
    logger.info(f"{verb} {len(stuck)} document(s) FAILED")


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Fail ingestions stuck past the timeout")
    parser.add_argument("--timeout-minutes", type=int, default=None)
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args()

    configure_logging()
    asyncio.run(run(args.timeout_minutes, args.dry_run))


if __name__ == "__main__":
    main()
