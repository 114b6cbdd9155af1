"""
Per-user activity storage.

A small key-value store: user id -> ordered list of ActivityEntry, most
recent first. Appending an entry whose key is already present moves it to
the front; lists are trimmed to the given capacity.

Dependencies: pydantic, fastapi.concurrency, compliance_portal.models.activity
System role: Storage for recent searches, bookmarks and recent documents
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from fastapi.concurrency import run_in_threadpool
from pydantic import TypeAdapter

from compliance_portal.models.activity import ActivityEntry

logger = logging.getLogger(__name__)

_ENTRY_LIST = TypeAdapter(list[ActivityEntry])


@runtime_checkable
class ActivityStore(Protocol):
    """Ordered, capped activity lists keyed by user id."""

    async def get(self, user_id: str) -> list[ActivityEntry]:
        """Entries for the user, most recent first (empty if none)."""
        ...

    async def append(self, user_id: str, entry: ActivityEntry, capacity: int) -> list[ActivityEntry]:
        """Insert at the front, dedupe by key, trim to capacity; return the new list."""
        ...

    async def remove(self, user_id: str, key: str) -> bool:
        """Remove the entry with this key; True when something was removed."""
        ...


def push_front(entries: list[ActivityEntry], entry: ActivityEntry, capacity: int) -> list[ActivityEntry]:
    """Return a new list with ``entry`` first, duplicates removed, trimmed to capacity."""
    kept = [existing for existing in entries if existing.key != entry.key]
    return [entry, *kept][:max(0, capacity)]


class InMemoryActivityStore:
    """Process-local activity store."""

    def __init__(self) -> None:
        self._data: dict[str, list[ActivityEntry]] = {}
        self._lock = asyncio.Lock()

    async def get(self, user_id: str) -> list[ActivityEntry]:
        return list(self._data.get(user_id, []))

    async def append(self, user_id: str, entry: ActivityEntry, capacity: int) -> list[ActivityEntry]:
        async with self._lock:
            updated = push_front(self._data.get(user_id, []), entry, capacity)
            self._data[user_id] = updated
            return list(updated)

    async def remove(self, user_id: str, key: str) -> bool:
        async with self._lock:
            entries = self._data.get(user_id, [])
            kept = [entry for entry in entries if entry.key != key]
            self._data[user_id] = kept
            return len(kept) != len(entries)


class JsonFileActivityStore:
    """
    Activity store persisted as one JSON map per file.

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so readers never see a partial file.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    def _read_sync(self) -> dict[str, list[ActivityEntry]]:
        if not self._path.exists():
            return {}
        raw = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        return {user_id: _ENTRY_LIST.validate_python(items) for user_id, items in raw.items()}

    def _write_sync(self, data: dict[str, list[ActivityEntry]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        serializable = {
            user_id: _ENTRY_LIST.dump_python(entries, mode="json")
            for user_id, entries in data.items()
        }
        fd, tmp_path = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(serializable, handle, indent=2)
            os.replace(tmp_path, self._path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    async def get(self, user_id: str) -> list[ActivityEntry]:
        data = await run_in_threadpool(self._read_sync)
        return data.get(user_id, [])

    async def append(self, user_id: str, entry: ActivityEntry, capacity: int) -> list[ActivityEntry]:
        async with self._lock:
            data = await run_in_threadpool(self._read_sync)
            data[user_id] = push_front(data.get(user_id, []), entry, capacity)
            await run_in_threadpool(self._write_sync, data)
            logger.debug(
                f"{__name__}:append - SUCCESS",
                extra={"store": self._path.name, "user_id": user_id, "size": len(data[user_id])},
            )
            return list(data[user_id])

    async def remove(self, user_id: str, key: str) -> bool:
        async with self._lock:
            data = await run_in_threadpool(self._read_sync)
            entries = data.get(user_id, [])
            kept = [entry for entry in entries if entry.key != key]
            if len(kept) == len(entries):
                return False
            data[user_id] = kept
            await run_in_threadpool(self._write_sync, data)
            return True
