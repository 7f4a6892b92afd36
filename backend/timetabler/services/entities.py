from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from functools import cached_property

BLOCK_SUBJECT_TYPES = frozenset({"lab", "practical"})
LAB_ROOM_TYPES = frozenset({"lab"})


@dataclass(frozen=True)
class SectionRecord:
    id: str
    name: str
    department_id: str
    semester: int


@dataclass(frozen=True)
class SubjectRecord:
    id: str
    code: str
    name: str
    department_id: str | None
    semester: int
    hours_per_week: int
    subject_type: str = "theory"

    @property
    def is_block(self) -> bool:
        return self.subject_type.lower() in BLOCK_SUBJECT_TYPES

    @property
    def priority(self) -> int:
        # Block subjects first, then the ones needing the most hours.
        return (2 if self.is_block else 1) * 100 + self.hours_per_week


@dataclass(frozen=True)
class StaffRecord:
    id: str
    name: str
    department_id: str
    max_hours_per_week: int = 20


@dataclass(frozen=True)
class RoomRecord:
    id: str
    room_number: str
    capacity: int
    room_type: str = "classroom"

    @property
    def is_lab(self) -> bool:
        return self.room_type.lower() in LAB_ROOM_TYPES


@dataclass(frozen=True)
class TimingRecord:
    day_of_week: int
    start_time: str
    end_time: str
    break_start: str | None = None
    break_end: str | None = None
    lunch_start: str | None = None
    lunch_end: str | None = None


@dataclass(frozen=True)
class Eligibility:
    staff_id: str
    subject_id: str


@dataclass(frozen=True)
class Assignment:
    section_id: str
    subject_id: str
    staff_id: str
    room_id: str
    day: int
    slot: int
    semester: int

    @property
    def section_key(self) -> tuple[str, int, int]:
        return (self.section_id, self.day, self.slot)

    @property
    def staff_key(self) -> tuple[str, int, int]:
        return (self.staff_id, self.day, self.slot)

    @property
    def room_key(self) -> tuple[str, int, int]:
        return (self.room_id, self.day, self.slot)


@dataclass(frozen=True)
class EntitySnapshot:
    """Read-only view of everything one generation run may schedule."""

    semester: int
    sections: tuple[SectionRecord, ...]
    subjects: tuple[SubjectRecord, ...]
    staff: tuple[StaffRecord, ...]
    rooms: tuple[RoomRecord, ...]
    eligibility: tuple[Eligibility, ...] = ()
    timings: tuple[TimingRecord, ...] = ()
    filler_subjects: tuple[SubjectRecord, ...] = ()
    department_ids: tuple[str, ...] = ()
    explicit_subjects: bool = False

    @cached_property
    def sections_by_id(self) -> dict[str, SectionRecord]:
        return {section.id: section for section in self.sections}

    @cached_property
    def rooms_by_id(self) -> dict[str, RoomRecord]:
        return {room.id: room for room in self.rooms}

    @cached_property
    def staff_by_id(self) -> dict[str, StaffRecord]:
        return {member.id: member for member in self.staff}

    @cached_property
    def subjects_by_id(self) -> dict[str, SubjectRecord]:
        subjects = {subject.id: subject for subject in self.filler_subjects}
        subjects.update({subject.id: subject for subject in self.subjects})
        return subjects

    @cached_property
    def _eligible_staff_ids(self) -> dict[str, list[str]]:
        mapping: dict[str, list[str]] = defaultdict(list)
        for pair in self.eligibility:
            if pair.staff_id in self.staff_by_id and pair.staff_id not in mapping[pair.subject_id]:
                mapping[pair.subject_id].append(pair.staff_id)
        return dict(mapping)

    @cached_property
    def _subjects_by_department(self) -> dict[str | None, list[SubjectRecord]]:
        grouped: dict[str | None, list[SubjectRecord]] = defaultdict(list)
        for subject in self.subjects:
            grouped[subject.department_id].append(subject)
        return dict(grouped)

    def subjects_for_section(self, section: SectionRecord) -> list[SubjectRecord]:
        """Subjects a section must be taught, hardest to place first."""
        if self.explicit_subjects:
            pool = list(self.subjects)
        else:
            pool = [
                subject
                for subject in self._subjects_by_department.get(section.department_id, [])
                if subject.semester == section.semester
            ]
        return sorted(pool, key=lambda subject: subject.priority, reverse=True)

    def department_pool(self, section: SectionRecord) -> list[SubjectRecord]:
        pool = self._subjects_by_department.get(section.department_id, [])
        if pool:
            return list(pool)
        return self.subjects_for_section(section)

    def eligible_staff(self, subject: SubjectRecord, department_id: str) -> list[StaffRecord]:
        """Authorised staff, else the department's staff, else everyone."""
        staff_ids = self._eligible_staff_ids.get(subject.id)
        if staff_ids:
            return [self.staff_by_id[staff_id] for staff_id in staff_ids]
        department_staff = [member for member in self.staff if member.department_id == department_id]
        if department_staff:
            return department_staff
        return list(self.staff)

    def rooms_for(self, subject: SubjectRecord) -> list[RoomRecord]:
        if subject.is_block:
            return [room for room in self.rooms if room.is_lab]
        return list(self.rooms)

    def filler_subject_for(self, section: SectionRecord, *, internship_from_semester: int) -> SubjectRecord | None:
        candidates = [*self.subjects, *self.filler_subjects]

        def matches(subject: SubjectRecord, *keywords: str) -> bool:
            name = subject.name.lower()
            in_scope = subject.department_id in (None, section.department_id) and not subject.is_block
            return in_scope and any(keyword in name for keyword in keywords)

        if section.semester >= internship_from_semester:
            keywords: tuple[str, ...] = ("internship", "project")
        else:
            keywords = ("library",)
        for subject in candidates:
            if matches(subject, *keywords):
                return subject
        return None
