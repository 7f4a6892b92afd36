from __future__ import annotations

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from timetabler.core.exceptions import ScopeResolutionError
from timetabler.models.college_timing import CollegeTiming
from timetabler.models.room import Room
from timetabler.models.section import Section
from timetabler.models.staff import Staff
from timetabler.models.staff_subject import StaffSubject
from timetabler.models.subject import Subject
from timetabler.schemas.generator import GenerationRequest
from timetabler.services.entities import (
    Eligibility,
    EntitySnapshot,
    RoomRecord,
    SectionRecord,
    StaffRecord,
    SubjectRecord,
    TimingRecord,
)

logger = logging.getLogger(__name__)

FILLER_NAME_KEYWORDS = ("library", "internship", "project")


def _enum_value(value: object) -> str:
    return str(getattr(value, "value", value))


def _section_record(row: Section) -> SectionRecord:
    return SectionRecord(id=row.id, name=row.name, department_id=row.department_id, semester=row.semester)


def _subject_record(row: Subject) -> SubjectRecord:
    return SubjectRecord(
        id=row.id,
        code=row.code,
        name=row.name,
        department_id=row.department_id,
        semester=row.semester,
        hours_per_week=row.hours_per_week,
        subject_type=_enum_value(row.subject_type),
    )


def _staff_record(row: Staff) -> StaffRecord:
    return StaffRecord(
        id=row.id,
        name=row.name,
        department_id=row.department_id,
        max_hours_per_week=row.max_hours_per_week,
    )


def _room_record(row: Room) -> RoomRecord:
    return RoomRecord(
        id=row.id,
        room_number=row.room_number,
        capacity=row.capacity,
        room_type=_enum_value(row.room_type),
    )


def _timing_record(row: CollegeTiming) -> TimingRecord:
    return TimingRecord(
        day_of_week=row.day_of_week,
        start_time=row.start_time,
        end_time=row.end_time,
        break_start=row.break_start,
        break_end=row.break_end,
        lunch_start=row.lunch_start,
        lunch_end=row.lunch_end,
    )


class EntityRepository:
    """Reads the entities one generation run is allowed to touch."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def load_scope(self, request: GenerationRequest) -> EntitySnapshot:
        advanced = request.advanced_mode
        semester = request.semester

        section_query = select(Section).order_by(Section.name, Section.id)
        if advanced and request.section_ids:
            section_query = section_query.where(Section.id.in_(request.section_ids))
        else:
            section_query = section_query.where(
                Section.department_id.in_(request.department_ids),
                Section.semester == semester,
            )
        sections = [_section_record(row) for row in self.db.execute(section_query).scalars()]
        if not sections:
            raise ScopeResolutionError(
                "sections",
                f"No sections found for semester {semester} in the selected departments",
            )

        department_ids = list(request.department_ids)
        for section in sections:
            if section.department_id not in department_ids:
                department_ids.append(section.department_id)

        explicit_subjects = bool(advanced and request.subject_ids)
        subject_query = select(Subject).order_by(Subject.code, Subject.id)
        if explicit_subjects:
            subject_query = subject_query.where(Subject.id.in_(request.subject_ids))
        else:
            subject_query = subject_query.where(
                Subject.department_id.in_(department_ids),
                Subject.semester == semester,
            )
        subjects = [_subject_record(row) for row in self.db.execute(subject_query).scalars()]
        if not subjects:
            raise ScopeResolutionError(
                "subjects",
                f"No subjects found for semester {semester} in the selected departments",
            )

        staff_query = select(Staff).order_by(Staff.name, Staff.id)
        if advanced and request.staff_ids:
            staff_query = staff_query.where(Staff.id.in_(request.staff_ids))
        else:
            staff_query = staff_query.where(Staff.department_id.in_(department_ids))
        staff = [_staff_record(row) for row in self.db.execute(staff_query).scalars()]
        if not staff:
            raise ScopeResolutionError("staff", "No staff available for the selected departments")

        room_query = select(Room).order_by(Room.room_number)
        if advanced and request.room_ids:
            room_query = room_query.where(Room.id.in_(request.room_ids))
        rooms = [_room_record(row) for row in self.db.execute(room_query).scalars()]
        if not rooms:
            raise ScopeResolutionError("rooms", "No rooms available for timetable generation")

        filler_subjects = self._load_filler_subjects(exclude={subject.id for subject in subjects})
        subject_ids = {subject.id for subject in subjects} | {subject.id for subject in filler_subjects}
        staff_ids = {member.id for member in staff}
        eligibility = [
            Eligibility(staff_id=row.staff_id, subject_id=row.subject_id)
            for row in self.db.execute(
                select(StaffSubject)
                .where(StaffSubject.subject_id.in_(sorted(subject_ids)))
                .order_by(StaffSubject.id)
            ).scalars()
            if row.staff_id in staff_ids
        ]
        timings = [
            _timing_record(row)
            for row in self.db.execute(select(CollegeTiming).order_by(CollegeTiming.day_of_week)).scalars()
        ]

        logger.info(
            "Resolved scope for semester %s: %s section(s), %s subject(s), %s staff, %s room(s), %s eligibility pair(s)",
            semester,
            len(sections),
            len(subjects),
            len(staff),
            len(rooms),
            len(eligibility),
        )
        return EntitySnapshot(
            semester=semester,
            sections=tuple(sections),
            subjects=tuple(subjects),
            staff=tuple(staff),
            rooms=tuple(rooms),
            eligibility=tuple(eligibility),
            timings=tuple(timings),
            filler_subjects=tuple(filler_subjects),
            department_ids=tuple(department_ids),
            explicit_subjects=explicit_subjects,
        )

    def _load_filler_subjects(self, *, exclude: set[str]) -> list[SubjectRecord]:
        name = func.lower(Subject.name)
        rows = self.db.execute(
            select(Subject)
            .where(or_(*(name.like(f"%{keyword}%") for keyword in FILLER_NAME_KEYWORDS)))
            .order_by(Subject.code, Subject.id)
        ).scalars()
        return [_subject_record(row) for row in rows if row.id not in exclude]
