"""Shared exceptions for service layer operations."""


class StorageError(Exception):
    """
    Raised when the key-value store cannot complete a read or write.

    The underlying driver exception is chained as ``__cause__`` so it can be
    logged server-side without being exposed to API callers.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)


class BookmarkOwnershipError(Exception):
    """Raised when a stored bookmark's owner disagrees with the key it lives under."""

    def __init__(self, bookmark_id: str, user_id: str) -> None:
        self.bookmark_id = bookmark_id
        self.user_id = user_id
        super().__init__(f"Bookmark {bookmark_id} is not owned by user {user_id}")
