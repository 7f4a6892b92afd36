from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from timetabler.core.exceptions import PersistenceError
from timetabler.models.timetable_entry import TimetableEntry
from timetabler.services.entities import Assignment

logger = logging.getLogger(__name__)

UPSERT_CHUNK_SIZE = 100
NATURAL_KEY = ("section_id", "day_of_week", "time_slot")
UPDATABLE_COLUMNS = ("subject_id", "staff_id", "room_id", "semester")
DIALECT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


@dataclass
class WriteReport:
    written: int = 0
    failed: int = 0
    repaired: bool = False


def _row(assignment: Assignment) -> dict:
    return {
        "id": str(uuid.uuid4()),
        "section_id": assignment.section_id,
        "subject_id": assignment.subject_id,
        "staff_id": assignment.staff_id,
        "room_id": assignment.room_id,
        "day_of_week": assignment.day,
        "time_slot": assignment.slot,
        "semester": assignment.semester,
    }


class TimetableWriter:
    """Replaces the stored timetable of a set of sections in one transaction.

    Staff and room clashes are checked per run, not by the table, so callers
    must serialise runs whose section sets overlap or that share staff and
    rooms.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def replace_sections(self, section_ids: Sequence[str], assignments: Sequence[Assignment]) -> WriteReport:
        rows = [_row(assignment) for assignment in assignments]
        try:
            self._clear(section_ids)
            self._bulk_upsert(rows)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning("Bulk timetable upsert failed, repairing row by row: %s", exc)
            return self._repair(section_ids, rows)

        logger.info("Stored %s timetable entries for %s section(s)", len(rows), len(section_ids))
        return WriteReport(written=len(rows))

    def _clear(self, section_ids: Sequence[str]) -> None:
        if section_ids:
            self.db.execute(delete(TimetableEntry).where(TimetableEntry.section_id.in_(list(section_ids))))

    def _bulk_upsert(self, rows: list[dict]) -> None:
        if not rows:
            return
        dialect = self.db.get_bind().dialect.name
        insert = DIALECT_INSERTS.get(dialect)
        if insert is None:
            for row in rows:
                self._insert_or_update(row)
            return
        for start in range(0, len(rows), UPSERT_CHUNK_SIZE):
            statement = insert(TimetableEntry).values(rows[start : start + UPSERT_CHUNK_SIZE])
            statement = statement.on_conflict_do_update(
                index_elements=list(NATURAL_KEY),
                set_={
                    **{column: statement.excluded[column] for column in UPDATABLE_COLUMNS},
                    "updated_at": func.now(),
                },
            )
            self.db.execute(statement)

    def _repair(self, section_ids: Sequence[str], rows: list[dict]) -> WriteReport:
        report = WriteReport(repaired=True)
        try:
            self._clear(section_ids)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError("Could not clear existing timetable entries", details={"error": str(exc)}) from exc

        for row in rows:
            try:
                with self.db.begin_nested():
                    self._insert_or_update(row)
                report.written += 1
            except SQLAlchemyError as exc:
                report.failed += 1
                logger.warning(
                    "Could not store entry for section %s day %s slot %s: %s",
                    row["section_id"],
                    row["day_of_week"],
                    row["time_slot"],
                    exc,
                )

        if rows and report.written == 0:
            self.db.rollback()
            raise PersistenceError(
                "Failed to store any timetable entries",
                details={"attempted": len(rows)},
            )

        self.db.commit()
        logger.info("Repair pass stored %s of %s timetable entries", report.written, len(rows))
        return report

    def _insert_or_update(self, row: dict) -> None:
        existing = self.db.execute(
            select(TimetableEntry).where(
                TimetableEntry.section_id == row["section_id"],
                TimetableEntry.day_of_week == row["day_of_week"],
                TimetableEntry.time_slot == row["time_slot"],
            )
        ).scalar_one_or_none()
        if existing is None:
            self.db.add(TimetableEntry(**row))
        else:
            for column in UPDATABLE_COLUMNS:
                setattr(existing, column, row[column])
        self.db.flush()
