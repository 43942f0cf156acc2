"""add confession reports and event logs

Revision ID: 7a8b9c0d1e23
Revises: 5e7f8a9b0c12
Create Date: 2026-09-10 00:00:00.000000
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "7a8b9c0d1e23"
down_revision: str | None = "5e7f8a9b0c12"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "confession_reports",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "confession_id",
            sa.String(length=36),
            sa.ForeignKey("confessions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("reason", sa.String(length=32), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="open"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_confession_reports_confession_id", "confession_reports", ["confession_id"])
    op.create_index("ix_confession_reports_status", "confession_reports", ["status"])
    op.create_index("ix_confession_reports_created_at", "confession_reports", ["created_at"])

    op.create_table(
        "event_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_name", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("day_bucket", sa.Date(), nullable=False),
        sa.Column("time_bucket", sa.Integer(), nullable=False),
        sa.Column("mode", sa.String(length=16), nullable=True),
        sa.Column("reason_bucket", sa.String(length=32), nullable=True),
        sa.Column("session_hash", sa.String(length=64), nullable=True),
    )
    op.create_index("ix_event_logs_event_name", "event_logs", ["event_name"])
    op.create_index("ix_event_logs_day_bucket", "event_logs", ["day_bucket"])


def downgrade() -> None:
    op.drop_index("ix_event_logs_day_bucket", table_name="event_logs")
    op.drop_index("ix_event_logs_event_name", table_name="event_logs")
    op.drop_table("event_logs")
    op.drop_index("ix_confession_reports_created_at", table_name="confession_reports")
    op.drop_index("ix_confession_reports_status", table_name="confession_reports")
    op.drop_index("ix_confession_reports_confession_id", table_name="confession_reports")
    op.drop_table("confession_reports")
