"""In-memory bookmark list for one client session."""
from schemas.bookmark import Bookmark
from schemas.sync_event import BookmarkAdded, BookmarkDeleted


class BookmarkState:
    """
    Ordered bookmark list (newest first) owned by a single session.

    Bookmarks are unique by id; every mutation keeps that invariant so a
    session's own echoed broadcast, or an event racing a fetch, is harmless.
    """

    def __init__(self) -> None:
        self._bookmarks: list[Bookmark] = []

    @property
    def bookmarks(self) -> list[Bookmark]:
        return list(self._bookmarks)

    def __len__(self) -> int:
        return len(self._bookmarks)

    def __contains__(self, bookmark_id: object) -> bool:
        return any(b.id == bookmark_id for b in self._bookmarks)

    def replace_all(self, bookmarks: list[Bookmark]) -> None:
        """Take the server's collection as the new list."""
        seen: set[str] = set()
        self._bookmarks = []
        for bookmark in bookmarks:
            if bookmark.id not in seen:
                seen.add(bookmark.id)
                self._bookmarks.append(bookmark)

    def prepend(self, bookmark: Bookmark) -> bool:
        """Add a bookmark at the front unless its id is already present."""
        if bookmark.id in self:
            return False
        self._bookmarks.insert(0, bookmark)
        return True

    def remove(self, bookmark_id: str) -> bool:
        """Drop the bookmark with this id; an absent id is a no-op."""
        remaining = [b for b in self._bookmarks if b.id != bookmark_id]
        removed = len(remaining) != len(self._bookmarks)
        self._bookmarks = remaining
        return removed

    def apply(self, event: BookmarkAdded | BookmarkDeleted) -> bool:
        """
        Apply an inbound sync event. Returns True if the list changed.

        Raises:
            TypeError: For anything that is not a known sync event.
        """
        if isinstance(event, BookmarkAdded):
            return self.prepend(event.bookmark)
        if isinstance(event, BookmarkDeleted):
            return self.remove(event.bookmark_id)
        raise TypeError(f"Unsupported sync event: {event!r}")

    def clear(self) -> None:
        self._bookmarks = []
