"""
Create kv_store table.

Holds every bookmark record under "bookmarks:{user_id}:{bookmark_id}". The
text_pattern_ops index lets PostgreSQL serve LIKE 'prefix%' scans from the
index regardless of the database collation.

Revision ID: 3c9d1e7a2b40
Revises:
Create Date: 2026-10-18 12:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3c9d1e7a2b40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema - create kv_store and its prefix index."""
    op.create_table(
        "kv_store",
        sa.Column("key", sa.Text(), nullable=False),
        sa.Column(
            "value",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("key"),
    )
    if op.get_bind().dialect.name == "postgresql":
        op.create_index(
            "ix_kv_store_key_prefix",
            "kv_store",
            ["key"],
            postgresql_ops={"key": "text_pattern_ops"},
        )


def downgrade() -> None:
    """Downgrade schema - drop kv_store."""
    if op.get_bind().dialect.name == "postgresql":
        op.drop_index("ix_kv_store_key_prefix", table_name="kv_store")
    op.drop_table("kv_store")
