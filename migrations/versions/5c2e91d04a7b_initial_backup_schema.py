"""initial backup schema

Revision ID: 5c2e91d04a7b
Revises:
Create Date: 2026-10-16 09:12:41.318604

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c2e91d04a7b"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create identities, blobs, rate counters and the owner index."""
    op.create_table(
        "identities",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "blobs",
        sa.Column("storage_key", sa.String(length=64), nullable=False),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("payload", sa.LargeBinary(), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("updated_at", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("storage_key"),
    )
    op.create_index(op.f("ix_blobs_owner_id"), "blobs", ["owner_id"], unique=False)
    op.create_table(
        "rate_limits",
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("count_this_hour", sa.Integer(), nullable=False),
        sa.Column("count_today", sa.Integer(), nullable=False),
        sa.Column("hour_window_end", sa.BigInteger(), nullable=False),
        sa.Column("day_window_end", sa.BigInteger(), nullable=False),
        sa.Column("last_write_at", sa.BigInteger(), nullable=True),
        sa.PrimaryKeyConstraint("owner_id"),
    )
    op.create_table(
        "owner_blob_index",
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("storage_key", sa.String(length=64), nullable=False),
        sa.PrimaryKeyConstraint("owner_id", "storage_key"),
    )


def downgrade() -> None:
    """Drop every backup table."""
    op.drop_table("owner_blob_index")
    op.drop_table("rate_limits")
    op.drop_index(op.f("ix_blobs_owner_id"), table_name="blobs")
    op.drop_table("blobs")
    op.drop_table("identities")
