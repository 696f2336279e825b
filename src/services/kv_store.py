"""
Key-value store over the kv_store table.

Keys are opaque strings and values are any JSON-serializable object. Every write
is committed on its own; callers get per-key atomicity and nothing more.
"""
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import delete as sa_delete
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models.kv_entry import KeyValueEntry
from services.exceptions import StorageError

logger = logging.getLogger(__name__)


def _upsert(db: AsyncSession, rows: list[dict[str, Any]]):  # noqa: ANN202
    """Build an INSERT ... ON CONFLICT (key) DO UPDATE for the session's dialect."""
    dialect = db.bind.dialect.name
    insert = postgresql_insert if dialect == "postgresql" else sqlite_insert
    stmt = insert(KeyValueEntry).values(rows)
    return stmt.on_conflict_do_update(
        index_elements=[KeyValueEntry.key],
        set_={"value": stmt.excluded.value},
    )


async def set(db: AsyncSession, key: str, value: Any) -> None:  # noqa: A001
    """Upsert ``value`` under ``key``."""
    try:
        await db.execute(_upsert(db, [{"key": key, "value": value}]))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StorageError(f"Failed to set key {key!r}") from e


async def get(db: AsyncSession, key: str) -> Any | None:
    """Return the value stored under ``key``, or None when the key is absent."""
    try:
        result = await db.execute(
            select(KeyValueEntry.value).where(KeyValueEntry.key == key),
        )
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to get key {key!r}") from e
    return result.scalar_one_or_none()


async def delete(db: AsyncSession, key: str) -> None:
    """Remove ``key``. Deleting an absent key is not an error."""
    try:
        await db.execute(sa_delete(KeyValueEntry).where(KeyValueEntry.key == key))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StorageError(f"Failed to delete key {key!r}") from e


async def mset(db: AsyncSession, items: Mapping[str, Any]) -> None:
    """Upsert several keys in one statement."""
    if not items:
        return
    rows = [{"key": key, "value": value} for key, value in items.items()]
    try:
        await db.execute(_upsert(db, rows))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StorageError(f"Failed to set {len(rows)} keys") from e


async def mget(db: AsyncSession, keys: Sequence[str]) -> list[Any]:
    """Return the values of the keys that exist, in no particular order."""
    if not keys:
        return []
    try:
        result = await db.execute(
            select(KeyValueEntry.value).where(KeyValueEntry.key.in_(keys)),
        )
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to get {len(keys)} keys") from e
    return list(result.scalars().all())


async def mdel(db: AsyncSession, keys: Sequence[str]) -> None:
    """Remove several keys. Absent keys are ignored."""
    if not keys:
        return
    try:
        await db.execute(sa_delete(KeyValueEntry).where(KeyValueEntry.key.in_(keys)))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StorageError(f"Failed to delete {len(keys)} keys") from e


async def get_by_prefix(db: AsyncSession, prefix: str) -> list[tuple[str, Any]]:
    """
    Return every (key, value) pair whose key starts with ``prefix``.

    ``%`` and ``_`` in the prefix are escaped so they match literally. SQLite's
    LIKE ignores case, so rows are re-checked with an exact prefix match.
    """
    try:
        result = await db.execute(
            select(KeyValueEntry.key, KeyValueEntry.value).where(
                KeyValueEntry.key.startswith(prefix, autoescape=True),
            ),
        )
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to scan prefix {prefix!r}") from e
    rows = [(row.key, row.value) for row in result if row.key.startswith(prefix)]
    logger.debug("kv_prefix_scan prefix=%s count=%s", prefix, len(rows))
    return rows
