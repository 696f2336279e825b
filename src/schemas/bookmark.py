"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from core.config import get_settings


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Bookmark(CamelModel):
    """
    A saved URL owned by exactly one user.

    Immutable once created; the only mutation is deletion.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    url: str
    user_id: str
    created_at: datetime


class BookmarkCreate(CamelModel):
    """
    Schema for creating a bookmark.

    Only ``url`` and ``title`` are accepted; any id, owner or timestamp sent by
    the client is ignored and assigned by the server.
    """

    url: str
    title: str

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Require a non-empty URL within the configured length."""
        v = v.strip()
        if not v:
            raise ValueError("URL is required")
        max_len = get_settings().max_url_length
        if len(v) > max_len:
            raise ValueError(f"URL exceeds maximum length of {max_len:,} characters")
        return v

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Require a non-empty title within the configured length."""
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        max_len = get_settings().max_title_length
        if len(v) > max_len:
            raise ValueError(f"Title exceeds maximum length of {max_len:,} characters")
        return v


class BookmarkListResponse(BaseModel):
    """Schema for the list endpoint."""

    bookmarks: list[Bookmark]


class BookmarkCreateResponse(BaseModel):
    """Schema for the create endpoint."""

    bookmark: Bookmark


class DeleteResponse(BaseModel):
    """Schema for the delete endpoint."""

    success: bool = True
