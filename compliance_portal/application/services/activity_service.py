"""
Activity service.

Tracks recent searches, bookmarks and recently viewed documents per user
on top of the ActivityStore abstraction.

Dependencies: compliance_portal.boundary.activity, compliance_portal.configs
System role: Per-user activity tracking
"""

import logging
from pathlib import Path

from compliance_portal.boundary.activity.activity_store import (
    ActivityStore,
    InMemoryActivityStore,
    JsonFileActivityStore,
)
from compliance_portal.configs.auxiliary import ActivitySettings
from compliance_portal.models.activity import ActivityEntry, ActivityKind

logger = logging.getLogger(__name__)


def build_activity_stores(settings: ActivitySettings) -> dict[ActivityKind, ActivityStore]:
    """
    One store per activity kind.

    Raises:
        ValueError: Unknown store type
    """
    store_type = settings.store_type.lower()
    if store_type == "memory":
        return {kind: InMemoryActivityStore() for kind in ActivityKind}
    if store_type == "file":
        directory = Path(settings.data_directory)
        return {
            kind: JsonFileActivityStore(directory / f"{kind.value}.json")
            for kind in ActivityKind
        }
    raise ValueError(f"Invalid ACTIVITY_STORE_TYPE: {store_type}. Must be 'memory' or 'file'.")


class ActivityService:
    """Recent searches, bookmarks and recent documents."""

    def __init__(
        self,
        stores: dict[ActivityKind, ActivityStore],
        settings: ActivitySettings | None = None,
        recent_search_capacity: int = 10,
    ) -> None:
        self._stores = stores
        self._settings = settings or ActivitySettings()
        self._capacity = {
            ActivityKind.RECENT_SEARCH: recent_search_capacity,
            ActivityKind.BOOKMARK: self._settings.bookmark_capacity,
            ActivityKind.RECENT_DOCUMENT: self._settings.recent_document_capacity,
        }

    async def _append(self, user_id: str, entry: ActivityEntry) -> list[ActivityEntry]:
        return await self._stores[entry.kind].append(user_id, entry, self._capacity[entry.kind])

    async def list_entries(self, user_id: str, kind: ActivityKind) -> list[ActivityEntry]:
        return await self._stores[kind].get(user_id)

    async def record_search(
        self,
        user_id: str,
        query: str,
        results_count: int,
        state_filter: list[str] | None = None,
    ) -> list[ActivityEntry]:
        """Track a search; repeating a query moves it to the front."""
        entry = ActivityEntry(
            kind=ActivityKind.RECENT_SEARCH,
            key=" ".join(query.lower().split()),
            payload={
                "query": query,
                "results_count": results_count,
                "states": list(state_filter or []),
            },
        )
        return await self._append(user_id, entry)

    async def add_bookmark(
        self,
        user_id: str,
        document_id: str,
        title: str | None = None,
        note: str | None = None,
    ) -> list[ActivityEntry]:
        entry = ActivityEntry(
            kind=ActivityKind.BOOKMARK,
            key=document_id,
            payload={"document_id": document_id, "title": title, "note": note},
        )
        logger.info(
            f"{__name__}:add_bookmark - SUCCESS",
            extra={"user_id": user_id, "document_id": document_id},
        )
        return await self._append(user_id, entry)

    async def remove_bookmark(self, user_id: str, document_id: str) -> bool:
        return await self._stores[ActivityKind.BOOKMARK].remove(user_id, document_id)

    async def record_document_view(
        self,
        user_id: str,
        document_id: str,
        title: str | None = None,
    ) -> list[ActivityEntry]:
        entry = ActivityEntry(
            kind=ActivityKind.RECENT_DOCUMENT,
            key=document_id,
            payload={"document_id": document_id, "title": title},
        )
        return await self._append(user_id, entry)
