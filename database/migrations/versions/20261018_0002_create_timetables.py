"""create timetables

Revision ID: 20261018_0002
Revises: 20261018_0001
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261018_0002"
down_revision = "20261018_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "timetables",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("section_id", sa.String(length=36), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("staff_id", sa.String(length=36), nullable=False),
        sa.Column("room_id", sa.String(length=36), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("time_slot", sa.Integer(), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("section_id", "day_of_week", "time_slot", name="uq_timetables_section_day_slot"),
    )
    op.create_index("ix_timetables_section_id", "timetables", ["section_id"])
    op.create_index("ix_timetables_staff_id", "timetables", ["staff_id"])
    op.create_index("ix_timetables_room_id", "timetables", ["room_id"])


def downgrade() -> None:
    op.drop_index("ix_timetables_room_id", table_name="timetables")
    op.drop_index("ix_timetables_staff_id", table_name="timetables")
    op.drop_index("ix_timetables_section_id", table_name="timetables")
    op.drop_table("timetables")
