"""create academic entity tables

Revision ID: 20261018_0001
Revises: None
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


subject_type_enum = sa.Enum("theory", "lab", "practical", "project", name="subject_type")
room_type_enum = sa.Enum("classroom", "lab", "other", name="room_type")


def upgrade() -> None:
    op.create_table(
        "departments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_departments_code", "departments", ["code"], unique=True)

    op.create_table(
        "sections",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_sections_department_id", "sections", ["department_id"])
    op.create_index("ix_sections_semester", "sections", ["semester"])

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=True),
        sa.Column("semester", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("hours_per_week", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("subject_type", subject_type_enum, nullable=False, server_default="theory"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_subjects_code", "subjects", ["code"])
    op.create_index("ix_subjects_department_id", "subjects", ["department_id"])
    op.create_index("ix_subjects_semester", "subjects", ["semester"])

    op.create_table(
        "staff",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("max_hours_per_week", sa.Integer(), nullable=False, server_default="20"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_staff_department_id", "staff", ["department_id"])

    op.create_table(
        "rooms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("room_number", sa.String(length=50), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="60"),
        sa.Column("room_type", room_type_enum, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_rooms_room_number", "rooms", ["room_number"], unique=True)

    op.create_table(
        "staff_subjects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("staff_id", sa.String(length=36), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.UniqueConstraint("staff_id", "subject_id", name="uq_staff_subjects_pair"),
    )
    op.create_index("ix_staff_subjects_staff_id", "staff_subjects", ["staff_id"])
    op.create_index("ix_staff_subjects_subject_id", "staff_subjects", ["subject_id"])

    op.create_table(
        "college_timings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("day_of_week", sa.Integer(), nullable=False, unique=True),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("break_start", sa.String(length=5), nullable=True),
        sa.Column("break_end", sa.String(length=5), nullable=True),
        sa.Column("lunch_start", sa.String(length=5), nullable=True),
        sa.Column("lunch_end", sa.String(length=5), nullable=True),
    )

    op.create_table(
        "students",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("roll_no", sa.String(length=50), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("section_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_students_roll_no", "students", ["roll_no"], unique=True)
    op.create_index("ix_students_department_id", "students", ["department_id"])
    op.create_index("ix_students_section_id", "students", ["section_id"])


def downgrade() -> None:
    op.drop_index("ix_students_section_id", table_name="students")
    op.drop_index("ix_students_department_id", table_name="students")
    op.drop_index("ix_students_roll_no", table_name="students")
    op.drop_table("students")
    op.drop_table("college_timings")
    op.drop_index("ix_staff_subjects_subject_id", table_name="staff_subjects")
    op.drop_index("ix_staff_subjects_staff_id", table_name="staff_subjects")
    op.drop_table("staff_subjects")
    op.drop_index("ix_rooms_room_number", table_name="rooms")
    op.drop_table("rooms")
    op.drop_index("ix_staff_department_id", table_name="staff")
    op.drop_table("staff")
    op.drop_index("ix_subjects_semester", table_name="subjects")
    op.drop_index("ix_subjects_department_id", table_name="subjects")
    op.drop_index("ix_subjects_code", table_name="subjects")
    op.drop_table("subjects")
    op.drop_index("ix_sections_semester", table_name="sections")
    op.drop_index("ix_sections_department_id", table_name="sections")
    op.drop_table("sections")
    op.drop_index("ix_departments_code", table_name="departments")
    op.drop_table("departments")
    room_type_enum.drop(op.get_bind(), checkfirst=True)
    subject_type_enum.drop(op.get_bind(), checkfirst=True)
