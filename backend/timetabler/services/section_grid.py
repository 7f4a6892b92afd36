from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from timetabler.core.exceptions import ResourceNotFoundError
from timetabler.models.room import Room
from timetabler.models.section import Section
from timetabler.models.staff import Staff
from timetabler.models.subject import Subject
from timetabler.models.timetable_entry import TimetableEntry
from timetabler.schemas.timetable import GridCell, SectionGrid
from timetabler.services.time_grid import TimeGrid


def empty_schedule(grid: TimeGrid) -> dict[str, dict[str, GridCell | None]]:
    return {
        grid.day_name(day): {grid.slot_label(slot): None for slot in grid.slot_range}
        for day in grid.day_range
    }


def build_section_grid(db: Session, section_id: str, grid: TimeGrid, *, source: str = "timetable") -> SectionGrid:
    section = db.get(Section, section_id)
    if section is None:
        raise ResourceNotFoundError("Section", section_id)

    entries = list(
        db.execute(
            select(TimetableEntry)
            .where(TimetableEntry.section_id == section_id)
            .order_by(TimetableEntry.day_of_week, TimetableEntry.time_slot)
        ).scalars()
    )
    subjects = _by_id(db, Subject, {entry.subject_id for entry in entries})
    staff = _by_id(db, Staff, {entry.staff_id for entry in entries})
    rooms = _by_id(db, Room, {entry.room_id for entry in entries})

    schedule = empty_schedule(grid)
    for entry in entries:
        if not grid.contains(entry.day_of_week, entry.time_slot):
            continue
        subject = subjects.get(entry.subject_id)
        member = staff.get(entry.staff_id)
        room = rooms.get(entry.room_id)
        schedule[grid.day_name(entry.day_of_week)][grid.slot_label(entry.time_slot)] = GridCell(
            subject_id=entry.subject_id,
            subject=subject.name if subject else "Unknown subject",
            subject_code=subject.code if subject else None,
            staff=member.name if member else None,
            room=room.room_number if room else None,
            subject_type=subject.subject_type.value if subject else None,
        )

    return SectionGrid(
        section_id=section.id,
        section_name=section.name,
        semester=section.semester,
        periods=[grid.slot_label(slot) for slot in grid.slot_range],
        schedule=schedule,
        source=source,
    ).recount()


def _by_id(db: Session, model, ids: set[str]) -> dict:
    if not ids:
        return {}
    return {row.id: row for row in db.execute(select(model).where(model.id.in_(sorted(ids)))).scalars()}
