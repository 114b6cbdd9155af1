"""
Local storage for original uploads.

Keeps the raw bytes of each uploaded file under ``{document_id}{suffix}``
so a document can be reprocessed without asking for the file again.

Dependencies: fastapi.concurrency
System role: Blob storage adapter for uploaded documents
"""

import logging
from pathlib import Path, PurePosixPath

from fastapi.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


class LocalFileStore:
    """Filesystem-backed upload store."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    def _path(self, document_id: str, filename: str | None) -> Path:
        suffix = PurePosixPath(filename or "").suffix.lower()
        return self._directory / f"{document_id}{suffix}"

    def _find(self, document_id: str) -> Path | None:
        if not self._directory.exists():
            return None
        return next(iter(sorted(self._directory.glob(f"{document_id}*"))), None)

    def _save_sync(self, document_id: str, filename: str | None, data: bytes) -> str:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._path(document_id, filename)
        path.write_bytes(data)
        return str(path)

    async def save(self, document_id: str, filename: str | None, data: bytes) -> str:
        """Store upload bytes; returns the stored path."""
        path = await run_in_threadpool(self._save_sync, document_id, filename, data)
        logger.info(
            f"{__name__}:save - SUCCESS",
            extra={"document_id": document_id, "bytes": len(data)},
        )
        return path

    async def load(self, document_id: str) -> bytes | None:
        """Stored bytes, or None when nothing was kept for this document."""
        path = await run_in_threadpool(self._find, document_id)
        if path is None:
            return None
        return await run_in_threadpool(path.read_bytes)

    async def delete(self, document_id: str) -> bool:
        path = await run_in_threadpool(self._find, document_id)
        if path is None:
            return False
        await run_in_threadpool(path.unlink, True)
        return True
