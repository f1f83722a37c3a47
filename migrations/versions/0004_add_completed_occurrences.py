"""add completion ledger for recurring occurrences"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0004_add_completed_occurrences"
down_revision = "0003_add_subtasks"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "completed_occurrences",
        sa.Column("key", sa.String(length=255), primary_key=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("completed_occurrences")
