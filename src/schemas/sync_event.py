"""
Sync events broadcast between sessions of the same user.

Events are a tagged union discriminated by ``type``:

    {"type": "added", "bookmark": {...}, "userId": "..."}
    {"type": "deleted", "bookmarkId": "...", "userId": "..."}

They are transient and never persisted.
"""
from typing import Annotated, Any, Literal

from pydantic import Field, TypeAdapter

from schemas.bookmark import Bookmark, CamelModel


class UnknownSyncEventError(ValueError):
    """Raised when an event payload carries a tag this client does not know."""

    def __init__(self, tag: object) -> None:
        self.tag = tag
        super().__init__(f"Unknown sync event type: {tag!r}")


class BookmarkAdded(CamelModel):
    """A bookmark was created by one of the user's sessions."""

    type: Literal["added"] = "added"
    bookmark: Bookmark
    user_id: str


class BookmarkDeleted(CamelModel):
    """A bookmark was deleted by one of the user's sessions."""

    type: Literal["deleted"] = "deleted"
    bookmark_id: str
    user_id: str


SyncEvent = Annotated[BookmarkAdded | BookmarkDeleted, Field(discriminator="type")]

SYNC_EVENT_TYPES = frozenset({"added", "deleted"})

_sync_event_adapter: TypeAdapter[SyncEvent] = TypeAdapter(SyncEvent)


def parse_sync_event(payload: Any) -> BookmarkAdded | BookmarkDeleted:
    """
    Validate a decoded event payload.

    Raises:
        UnknownSyncEventError: If the ``type`` tag is missing or unrecognized.
        pydantic.ValidationError: If a known event is malformed.
    """
    tag = payload.get("type") if isinstance(payload, dict) else None
    if tag not in SYNC_EVENT_TYPES:
        raise UnknownSyncEventError(tag)
    return _sync_event_adapter.validate_python(payload)


def dump_sync_event(event: BookmarkAdded | BookmarkDeleted) -> dict[str, Any]:
    """Serialize an event to its JSON-ready wire form."""
    return event.model_dump(mode="json", by_alias=True)
