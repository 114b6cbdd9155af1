"""
User activity models and schemas.

Recent searches, bookmarks and recently viewed documents are kept as
ordered, size-capped lists of ActivityEntry per user.

Dependencies: pydantic
System role: Activity API contracts and storage records
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ActivityKind(str, Enum):
    """Kinds of per-user activity lists."""

    RECENT_SEARCH = "recent_search"
    BOOKMARK = "bookmark"
    RECENT_DOCUMENT = "recent_document"


class ActivityEntry(BaseModel):
    """One item in a user's activity list."""

    kind: ActivityKind
    key: str = Field(description="Dedupe key; appending an equal key moves the entry to the front")
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class BookmarkRequest(BaseModel):
    """Request schema for bookmarking a document."""

    document_id: str
    title: str | None = None
    note: str | None = Field(default=None, max_length=1000)


class ActivityListResponse(BaseModel):
    """List of activity entries, most recent first."""

    user_id: str
    kind: ActivityKind
    entries: list[ActivityEntry]
