from __future__ import annotations

import logging
import math
import random
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from timetabler.core.exceptions import GenerationCancelledError
from timetabler.services.conflict_resolver import assert_conflict_free
from timetabler.services.entities import (
    Assignment,
    EntitySnapshot,
    RoomRecord,
    SectionRecord,
    StaffRecord,
    SubjectRecord,
)
from timetabler.services.occupancy import OccupancyIndex
from timetabler.services.time_grid import SchedulingPolicy

logger = logging.getLogger(__name__)

CancelCheck = Callable[[], bool]


@dataclass(frozen=True)
class HoursShortfall:
    section_id: str
    subject_id: str
    subject_code: str
    required_hours: int
    placed_hours: int

    @property
    def missing_hours(self) -> int:
        return max(0, self.required_hours - self.placed_hours)


@dataclass(frozen=True)
class Placement:
    day: int
    slots: tuple[int, ...]
    staff: StaffRecord
    room: RoomRecord


@dataclass
class ScheduleResult:
    assignments: list[Assignment] = field(default_factory=list)
    shortfalls: list[HoursShortfall] = field(default_factory=list)
    filler_count: int = 0


def block_slots(start_slot: int, block_size: int) -> tuple[int, ...]:
    return tuple(range(start_slot, start_slot + block_size))


def raise_if_cancelled(should_stop: CancelCheck | None) -> None:
    if should_stop is not None and should_stop():
        raise GenerationCancelledError()


class FallbackScheduler:
    """Greedy first-fit scheduler that needs nothing but the entity snapshot.

    Subjects are placed one section at a time, hardest first. Slot candidates
    are shuffled with the injected random source and biased towards days the
    subject has not used yet. Placement never backtracks: hours that cannot be
    placed are reported as shortfalls.
    """

    def __init__(
        self,
        snapshot: EntitySnapshot,
        policy: SchedulingPolicy,
        *,
        rng: random.Random | None = None,
        should_stop: CancelCheck | None = None,
    ) -> None:
        self.snapshot = snapshot
        self.policy = policy
        self.grid = policy.grid
        self.random = rng or random.Random()
        self.should_stop = should_stop
        self.index = OccupancyIndex()
        self.staff_load: Counter[str] = Counter()
        self.result = ScheduleResult()

    def build(self) -> ScheduleResult:
        for section in self.snapshot.sections:
            for subject in self.snapshot.subjects_for_section(section):
                self._schedule_subject(section, subject)
            if self.policy.fill_free_periods:
                self._fill_free_periods(section)

        assert_conflict_free(self.result.assignments)
        logger.info(
            "Fallback scheduler placed %s assignments for %s section(s) (%s filler, %s shortfall(s))",
            len(self.result.assignments),
            len(self.snapshot.sections),
            self.result.filler_count,
            len(self.result.shortfalls),
        )
        return self.result

    def _block_size(self, subject: SubjectRecord) -> int:
        return self.policy.lab_block_size if subject.is_block else 1

    def _ordered_staff(self, staff: Sequence[StaffRecord]) -> list[StaffRecord]:
        def load_key(member: StaffRecord) -> tuple[bool, int]:
            load = self.staff_load[member.id]
            return (load >= member.max_hours_per_week, load)

        return sorted(staff, key=load_key)

    def _candidate_starts(self, block_size: int, days_used: set[int], *, deterministic: bool) -> list[tuple[int, int]]:
        candidates = self.grid.block_starts(block_size)
        if deterministic:
            return sorted(candidates)
        self.random.shuffle(candidates)
        candidates.sort(key=lambda coordinate: coordinate[0] in days_used)
        return candidates

    def _find_placement(
        self,
        section: SectionRecord,
        block_size: int,
        staff: Sequence[StaffRecord],
        rooms: Sequence[RoomRecord],
        days_used: set[int],
        *,
        deterministic: bool,
    ) -> Placement | None:
        for day, start_slot in self._candidate_starts(block_size, days_used, deterministic=deterministic):
            slots = block_slots(start_slot, block_size)
            if not self.index.block_free_for_section(section.id, day, slots):
                continue
            pair = self.index.find_free_pair(staff, rooms, day, slots)
            if pair is not None:
                member, room = pair
                return Placement(day=day, slots=slots, staff=member, room=room)
        return None

    def _commit(self, section: SectionRecord, subject: SubjectRecord, placement: Placement) -> None:
        for slot in placement.slots:
            assignment = Assignment(
                section_id=section.id,
                subject_id=subject.id,
                staff_id=placement.staff.id,
                room_id=placement.room.id,
                day=placement.day,
                slot=slot,
                semester=self.snapshot.semester,
            )
            self.index.reserve(assignment)
            self.result.assignments.append(assignment)
        self.staff_load[placement.staff.id] += len(placement.slots)

    def _schedule_subject(self, section: SectionRecord, subject: SubjectRecord) -> None:
        block_size = self._block_size(subject)
        blocks_needed = math.ceil(subject.hours_per_week / block_size)
        staff = self.snapshot.eligible_staff(subject, section.department_id)
        rooms = self.snapshot.rooms_for(subject)
        if not staff or not rooms:
            logger.warning(
                "Skipping %s for section %s: no eligible %s",
                subject.code,
                section.name,
                "staff" if not staff else "rooms",
            )
            self._record_shortfall(section, subject, placed_blocks=0, block_size=block_size)
            return

        days_used: set[int] = set()
        placed_blocks = 0
        attempts = 0
        while placed_blocks < blocks_needed and attempts < self.policy.max_placement_attempts:
            raise_if_cancelled(self.should_stop)
            attempts += 1
            placement = self._find_placement(
                section,
                block_size,
                self._ordered_staff(staff),
                rooms,
                days_used,
                deterministic=attempts > self.policy.deterministic_scan_after,
            )
            if placement is None:
                # Nothing changed since the scan, so another one cannot succeed.
                break
            self._commit(section, subject, placement)
            days_used.add(placement.day)
            placed_blocks += 1

        if placed_blocks < blocks_needed:
            self._record_shortfall(section, subject, placed_blocks=placed_blocks, block_size=block_size)

    def _record_shortfall(
        self,
        section: SectionRecord,
        subject: SubjectRecord,
        *,
        placed_blocks: int,
        block_size: int,
    ) -> None:
        shortfall = HoursShortfall(
            section_id=section.id,
            subject_id=subject.id,
            subject_code=subject.code,
            required_hours=subject.hours_per_week,
            placed_hours=min(subject.hours_per_week, placed_blocks * block_size),
        )
        self.result.shortfalls.append(shortfall)
        logger.warning(
            "Section %s: placed %s of %s hours for %s",
            section.name,
            shortfall.placed_hours,
            shortfall.required_hours,
            subject.code,
        )

    def _fill_free_periods(self, section: SectionRecord) -> None:
        filler = self.snapshot.filler_subject_for(
            section,
            internship_from_semester=self.policy.internship_from_semester,
        )
        if filler is None:
            logger.debug("No filler subject available for section %s", section.name)
            return

        staff = self.snapshot.eligible_staff(filler, section.department_id)
        rooms = sorted(self.snapshot.rooms, key=lambda room: room.is_lab)
        for day, slot in self.grid.coordinates():
            raise_if_cancelled(self.should_stop)
            if not self.index.section_free(section.id, day, slot):
                continue
            pair = self.index.find_free_pair(self._ordered_staff(staff), rooms, day, (slot,))
            if pair is None:
                continue
            member, room = pair
            self._commit(section, filler, Placement(day=day, slots=(slot,), staff=member, room=room))
            self.result.filler_count += 1
