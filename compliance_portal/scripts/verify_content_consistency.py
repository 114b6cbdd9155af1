"""
Content consistency verification utility.

Usage:
    python -m compliance_portal.scripts.verify_content_consistency
    python -m compliance_portal.scripts.verify_content_consistency --limit 20 --sample-size 10

Purpose:
- For each COMPLETED document, sample its indexed chunks
- Check each chunk's text equals Document.content at the recorded offsets
- Report a GOOD, PARTIAL, POOR or NO_VECTORS verdict per document

Dependencies: compliance_portal.core.consistency
System role: Operator tool for detecting stale or mismatched vectors
"""

import argparse
import asyncio
import sys

from compliance_portal.api.deps.dependencies import ServiceCache
from compliance_portal.core.consistency import ConsistencyVerdict, ContentVerifier
from compliance_portal.core.exceptions import VectorStoreError
from compliance_portal.observability.logger import configure_logging, get_logger

logger = get_logger(__name__)


async def run(limit: int | None, sample_size: int) -> int:
    cache = ServiceCache()
    verifier = ContentVerifier(cache.vector_client, cache.session_factory, sample_size=sample_size)
    summary = await verifier.verify_all(limit=limit)

    for report in summary.reports:
        logger.info(
            f"{report.verdict.value:<14} {report.document_id} "
            f"({report.matching}/{report.sampled} sampled chunks match, "
            f"{report.vector_count} vectors) {report.title}"
        )
    logger.info(f"Checked {summary.documents_checked} documents")
    for verdict, count in summary.by_verdict.items():
        logger.info(f"  {verdict.value}: {count}")

    return 0 if set(summary.by_verdict) <= {ConsistencyVerdict.GOOD} else 1


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Verify indexed chunks match stored document content")
    parser.add_argument("--limit", type=int, default=None, help="Check at most this many documents")
    parser.add_argument("--sample-size", type=int, default=5, help="Chunks sampled per document")
    args = parser.parse_args()

    configure_logging()
    try:
        sys.exit(asyncio.run(run(args.limit, args.sample_size)))
    except VectorStoreError as e:
        logger.error(f"Vector store unavailable: {e}")
        sys.exit(2)


if __name__ == "__main__":
    main()
