"""
Client session: one signed-in user's credential, live subscription and state.

A session fetches the full list once, applies its own confirmed changes
locally, then broadcasts them so the user's other sessions converge without
re-fetching. Failed calls notify the user and leave the state untouched; there
are no retries.
"""
import logging

import httpx

from client.api_client import BookmarksApiClient
from client.notifier import Notifier
from client.state import BookmarkState
from core.realtime import BookmarkChannel, RealtimeUnavailableError
from schemas.bookmark import Bookmark
from schemas.current_user import CurrentUser
from schemas.sync_event import BookmarkAdded, BookmarkDeleted
from shared.api_errors import parse_http_error

logger = logging.getLogger(__name__)


class BookmarkSession:
    """
    State and operations for one authenticated client session.

    Once closed, the session ignores late API responses and inbound events:
    whatever they would have mutated no longer belongs to an active session.
    """

    def __init__(
        self,
        user: CurrentUser,
        access_token: str,
        api: BookmarksApiClient,
        channel: BookmarkChannel,
        notifier: Notifier,
    ) -> None:
        self.user = user
        self.access_token = access_token
        self.state = BookmarkState()
        self._api = api
        self._channel = channel
        self._notifier = notifier
        self._closed = False

    @property
    def is_active(self) -> bool:
        return not self._closed

    @property
    def bookmarks(self) -> list[Bookmark]:
        return self.state.bookmarks

    async def start(self) -> None:
        """Open the user's channel, then load the bookmark list."""
        try:
            await self._channel.open(self.handle_event)
        except RealtimeUnavailableError as e:
            # Live updates are a convenience; the session still works without them
            logger.warning("Live updates unavailable for user_id=%s: %s", self.user.id, e)
        await self.refresh()

    async def refresh(self) -> bool:
        """Replace local state with the server's list. Returns False on failure."""
        try:
            bookmarks = await self._api.list_bookmarks(self.access_token)
        except httpx.HTTPError as e:
            self._report_failure("Failed to load bookmarks", e)
            return False
        if self._closed:
            return False
        self.state.replace_all(bookmarks)
        return True

    async def add_bookmark(self, url: str, title: str) -> Bookmark | None:
        """Create a bookmark, record it locally, then tell the other sessions."""
        if self._closed:
            return None
        if not url.strip() or not title.strip():
            self._notifier.error("URL and title are required")
            return None

        try:
            bookmark = await self._api.create_bookmark(self.access_token, url, title)
        except httpx.HTTPError as e:
            self._report_failure("Failed to add bookmark", e)
            return None
        if self._closed:
            return None

        self.state.prepend(bookmark)
        await self._channel.send(BookmarkAdded(bookmark=bookmark, user_id=self.user.id))
        self._notifier.success("Bookmark added successfully")
        return bookmark

    async def delete_bookmark(self, bookmark_id: str) -> bool:
        """Delete a bookmark, drop it locally, then tell the other sessions."""
        if self._closed:
            return False

        try:
            await self._api.delete_bookmark(self.access_token, bookmark_id)
        except httpx.HTTPError as e:
            self._report_failure("Failed to delete bookmark", e)
            return False
        if self._closed:
            return False

        self.state.remove(bookmark_id)
        await self._channel.send(BookmarkDeleted(bookmark_id=bookmark_id, user_id=self.user.id))
        self._notifier.success("Bookmark deleted")
        return True

    def handle_event(self, event: BookmarkAdded | BookmarkDeleted) -> None:
        """Apply a sync event received from another session."""
        if self._closed:
            return
        if self.state.apply(event):
            logger.debug("sync_event_applied user_id=%s type=%s", self.user.id, event.type)

    async def close(self) -> None:
        """Release the subscription and clear local state."""
        if self._closed:
            return
        self._closed = True
        await self._channel.close()
        self.state.clear()

    def _report_failure(self, action: str, e: httpx.HTTPError) -> None:
        parsed = parse_http_error(e)
        logger.warning("%s user_id=%s category=%s: %s", action, self.user.id, parsed.category, e)
        self._notifier.error(f"{action}: {parsed.message}")
