"""Add place cache table.

Revision ID: 5e7f8a9b0c12
Revises: 3c1d2e4f5a60
Create Date: 2026-09-03 00:00:00.000000

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# Alembic identifiers
revision: str = "5e7f8a9b0c12"
down_revision: str | Sequence[str] | None = "3c1d2e4f5a60"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "place_cache",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("q", sa.Text(), nullable=False),
        sa.Column("q_lower", sa.Text(), nullable=False),
        sa.Column("lat", sa.Float(), nullable=False),
        sa.Column("lng", sa.Float(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("provider", sa.String(length=32), nullable=False, server_default="nominatim"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("q_lower", name="uq_place_cache_q_lower"),
    )
    op.create_index("ix_place_cache_created_at", "place_cache", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_place_cache_created_at", table_name="place_cache")
    op.drop_table("place_cache")
