"""Add assignments ledger with one row per (user, case)

Revision ID: 202610170002
Revises: 202610170001
Create Date: 2026-10-17 00:02:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "202610170002"
down_revision = "202610170001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "assignments",
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
        sa.Column(
            "assigned_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        # Concurrent duplicate inserts fail here instead of silently succeeding
        sa.UniqueConstraint("user_id", "case_id", name="uq_assignment_user_case"),
    )
    op.create_index("ix_assignments_user_id", "assignments", ["user_id"])
    op.create_index("ix_assignments_case_id", "assignments", ["case_id"])


def downgrade() -> None:
    op.drop_index("ix_assignments_case_id", "assignments")
    op.drop_index("ix_assignments_user_id", "assignments")
    op.drop_table("assignments")
