"""Add responses table for reviewer verdicts on assigned cases

Revision ID: 202610170003
Revises: 202610170002
Create Date: 2026-10-17 00:03:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "202610170003"
down_revision = "202610170002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "responses",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "case_id",
            sa.String(length=36),
            sa.ForeignKey("cases.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_real", sa.Boolean(), nullable=False),
        sa.Column(
            "responded_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_responses_user_id", "responses", ["user_id"])
    op.create_index("ix_responses_case_id", "responses", ["case_id"])


def downgrade() -> None:
    op.drop_index("ix_responses_case_id", "responses")
    op.drop_index("ix_responses_user_id", "responses")
    op.drop_table("responses")
