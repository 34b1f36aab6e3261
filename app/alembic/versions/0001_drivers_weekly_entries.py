"""drivers and weekly entries

Revision ID: 0001
Revises:
Create Date: 2025-11-03
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "drivers",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("license_number", sa.String(50), nullable=True),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("join_date", sa.Date(), nullable=True),
        sa.Column("profile_image_url", sa.String(500), nullable=True),
        sa.Column("hidden", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("removed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("phone", name="uq_drivers_phone"),
    )

    op.create_table(
        "weekly_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "driver_id",
            sa.String(32),
            sa.ForeignKey("drivers.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("week_start", sa.Date(), nullable=False),
        sa.Column("week_end", sa.Date(), nullable=False),
        sa.Column("earnings", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("trips", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.UniqueConstraint("driver_id", "week_start", name="uq_weekly_driver_week"),
    )
    op.create_index("ix_weekly_entries_driver_id", "weekly_entries", ["driver_id"])
    op.create_index("ix_weekly_entries_week_start", "weekly_entries", ["week_start"])


def downgrade():
    op.drop_index("ix_weekly_entries_week_start", table_name="weekly_entries")
    op.drop_index("ix_weekly_entries_driver_id", table_name="weekly_entries")
    op.drop_table("weekly_entries")
    op.drop_table("drivers")
