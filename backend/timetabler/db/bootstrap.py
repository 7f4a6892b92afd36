from __future__ import annotations

import logging

from sqlalchemy import inspect

import timetabler.models  # noqa: F401
from timetabler.db.base import Base
from timetabler.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "sections": {"id", "department_id", "semester"},
    "subjects": {"id", "department_id", "semester", "hours_per_week", "subject_type"},
    "staff": {"id", "department_id", "max_hours_per_week"},
    "rooms": {"id", "room_number", "room_type"},
    "staff_subjects": {"staff_id", "subject_id"},
    "timetables": {"section_id", "subject_id", "staff_id", "room_id", "day_of_week", "time_slot", "semester"},
}


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_schema() -> None:
    try:
        # Alembic owns real migrations; this only fills in tables a fresh database lacks.
        Base.metadata.create_all(bind=engine)
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Schema bootstrap failed")
        raise RuntimeError("Schema bootstrap failed") from exc
