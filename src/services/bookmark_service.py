"""
Service layer for bookmark operations.

Bookmarks live in the key-value store under ``bookmarks:{user_id}:{bookmark_id}``.
The user id always comes from the verified caller, never from client input, so a
caller can only ever address keys under their own prefix.
"""
import logging
from datetime import UTC, datetime
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from uuid6 import uuid7

from schemas.bookmark import Bookmark, BookmarkCreate
from services import kv_store
from services.exceptions import BookmarkOwnershipError

logger = logging.getLogger(__name__)

KEY_NAMESPACE = "bookmarks"


def user_prefix(user_id: str) -> str:
    """Key prefix covering exactly one user's bookmarks."""
    return f"{KEY_NAMESPACE}:{user_id}:"


def bookmark_key(user_id: str, bookmark_id: str) -> str:
    """Storage key for one bookmark."""
    return f"{user_prefix(user_id)}{bookmark_id}"


async def list_bookmarks(db: AsyncSession, user_id: str) -> list[Bookmark]:
    """
    Return all bookmarks stored under the user's prefix, newest first.

    Records that fail validation or whose key does not match their ``userId``
    and ``id`` fields are left out and logged.
    """
    bookmarks = []
    for key, value in await kv_store.get_by_prefix(db, user_prefix(user_id)):
        try:
            bookmark = Bookmark.model_validate(value)
        except ValidationError:
            logger.exception("Skipping malformed bookmark record key=%s", key)
            continue
        if key != bookmark_key(bookmark.user_id, bookmark.id) or bookmark.user_id != user_id:
            logger.error(
                "Skipping bookmark record whose key disagrees with its fields key=%s",
                key,
            )
            continue
        bookmarks.append(bookmark)
    bookmarks.sort(key=lambda b: (b.created_at, b.id), reverse=True)
    return bookmarks


async def create_bookmark(
    db: AsyncSession,
    user_id: str,
    data: BookmarkCreate,
) -> Bookmark:
    """Create a bookmark with a server-assigned id and timestamp."""
    bookmark = Bookmark(
        id=str(uuid7()),
        title=data.title,
        url=data.url,
        user_id=user_id,
        created_at=datetime.now(UTC),
    )
    await kv_store.set(
        db,
        bookmark_key(user_id, bookmark.id),
        bookmark.model_dump(mode="json", by_alias=True),
    )
    logger.info("bookmark_created user_id=%s bookmark_id=%s", user_id, bookmark.id)
    return bookmark


async def delete_bookmark(db: AsyncSession, user_id: str, bookmark_id: str) -> None:
    """
    Delete a bookmark. Idempotent: a missing bookmark is not an error.

    Raises:
        BookmarkOwnershipError: If a record exists under the caller's key but
            names a different owner.
    """
    key = bookmark_key(user_id, bookmark_id)
    existing = await kv_store.get(db, key)
    if isinstance(existing, dict) and existing.get("userId") != user_id:
        raise BookmarkOwnershipError(bookmark_id, user_id)
    await kv_store.delete(db, key)
    logger.info("bookmark_deleted user_id=%s bookmark_id=%s", user_id, bookmark_id)
