"""Key-value entry model backing the bookmark store."""
from typing import Any

from sqlalchemy import JSON, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class KeyValueEntry(Base):
    """
    One opaque string key mapped to a JSON value.

    Keys are namespaced by convention (e.g. "bookmarks:{user_id}:{bookmark_id}")
    so a LIKE prefix scan on the primary key returns a single user's records.
    """

    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(Text, primary_key=True)
    value: Mapped[Any] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
    )
