"""Activity storage boundary (recent searches, bookmarks, recent documents)."""

from compliance_portal.boundary.activity.activity_store import (
    ActivityStore,
    InMemoryActivityStore,
    JsonFileActivityStore,
    push_front,
)

__all__ = ["ActivityStore", "InMemoryActivityStore", "JsonFileActivityStore", "push_front"]
