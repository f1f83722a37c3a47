"""add recurrence fields"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0002_add_recurrence"
down_revision = "0001_create_tasks"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        "tasks",
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    op.add_column("tasks", sa.Column("recurring_type", sa.String(length=20), nullable=True))
    op.add_column("tasks", sa.Column("recurring_interval", sa.Integer(), nullable=True))
    op.add_column(
        "tasks",
        sa.Column("recurring_days", sa.Text(), nullable=False, server_default=""),
    )
    op.add_column("tasks", sa.Column("recurring_end_date", sa.Date(), nullable=True))
    op.add_column("tasks", sa.Column("recurring_end_count", sa.Integer(), nullable=True))
    op.add_column(
        "tasks",
        sa.Column("excluded_dates", sa.Text(), nullable=False, server_default=""),
    )


def downgrade() -> None:
    op.drop_column("tasks", "excluded_dates")
    op.drop_column("tasks", "recurring_end_count")
    op.drop_column("tasks", "recurring_end_date")
    op.drop_column("tasks", "recurring_days")
    op.drop_column("tasks", "recurring_interval")
    op.drop_column("tasks", "recurring_type")
    op.drop_column("tasks", "is_recurring")
