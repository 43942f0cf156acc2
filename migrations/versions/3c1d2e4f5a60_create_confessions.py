"""create confessions and actor cooldowns

Revision ID: 3c1d2e4f5a60
Revises:
Create Date: 2026-09-01 00:00:00.000000
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3c1d2e4f5a60"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "confessions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lng", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("hidden", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("actor_id", sa.String(length=128), nullable=True),
        sa.CheckConstraint("char_length(text) BETWEEN 1 AND 120", name="ck_confessions_text_len"),
        sa.CheckConstraint(
            "(lat IS NULL) = (lng IS NULL)", name="ck_confessions_lat_lng_together"
        ),
    )
    op.create_index("ix_confessions_created_at_id", "confessions", ["created_at", "id"])
    op.create_index("ix_confessions_expires_at", "confessions", ["expires_at"])
    op.create_index("ix_confessions_actor_created_at", "confessions", ["actor_id", "created_at"])

    op.create_table(
        "actor_cooldowns",
        sa.Column("actor_id", sa.String(length=128), primary_key=True),
        sa.Column("last_posted_at", sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("actor_cooldowns")
    op.drop_index("ix_confessions_actor_created_at", table_name="confessions")
    op.drop_index("ix_confessions_expires_at", table_name="confessions")
    op.drop_index("ix_confessions_created_at_id", table_name="confessions")
    op.drop_table("confessions")
