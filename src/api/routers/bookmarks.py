"""Bookmark list/create/delete endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from schemas.bookmark import (
    BookmarkCreate,
    BookmarkCreateResponse,
    BookmarkListResponse,
    DeleteResponse,
)
from schemas.current_user import CurrentUser
from services import bookmark_service
from services.exceptions import BookmarkOwnershipError, StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


@router.get("", response_model=BookmarkListResponse)
async def list_bookmarks(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkListResponse:
    """List every bookmark owned by the current user."""
    try:
        bookmarks = await bookmark_service.list_bookmarks(db, current_user.id)
    except StorageError:
        logger.exception("Error fetching bookmarks user_id=%s", current_user.id)
        raise HTTPException(status_code=500, detail="Failed to fetch bookmarks")
    return BookmarkListResponse(bookmarks=bookmarks)


@router.post("", response_model=BookmarkCreateResponse)
async def create_bookmark(
    data: BookmarkCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkCreateResponse:
    """Create a bookmark and return it with its server-assigned id and timestamp."""
    try:
        bookmark = await bookmark_service.create_bookmark(db, current_user.id, data)
    except StorageError:
        logger.exception("Error adding bookmark user_id=%s", current_user.id)
        raise HTTPException(status_code=500, detail="Failed to add bookmark")
    return BookmarkCreateResponse(bookmark=bookmark)


@router.delete("/{bookmark_id}", response_model=DeleteResponse)
async def delete_bookmark(
    bookmark_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> DeleteResponse:
    """
    Delete a bookmark by id.

    Deleting an id that does not exist (or was already deleted) succeeds.
    """
    try:
        await bookmark_service.delete_bookmark(db, current_user.id, bookmark_id)
    except BookmarkOwnershipError:
        logger.exception("Refusing to delete bookmark with mismatched owner")
        raise HTTPException(status_code=500, detail="Failed to delete bookmark")
    except StorageError:
        logger.exception("Error deleting bookmark user_id=%s", current_user.id)
        raise HTTPException(status_code=500, detail="Failed to delete bookmark")
    return DeleteResponse(success=True)
