from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

from timetabler.services.conflict_resolver import assert_conflict_free
from timetabler.services.entities import Assignment, EntitySnapshot, SectionRecord, StaffRecord, SubjectRecord
from timetabler.services.fallback_scheduler import CancelCheck, block_slots, raise_if_cancelled
from timetabler.services.occupancy import OccupancyIndex
from timetabler.services.time_grid import SchedulingPolicy

logger = logging.getLogger(__name__)


@dataclass
class DensifyResult:
    assignments: list[Assignment]
    added: int = 0


class _Densifier:
    def __init__(
        self,
        assignments: Sequence[Assignment],
        snapshot: EntitySnapshot,
        policy: SchedulingPolicy,
        should_stop: CancelCheck | None,
    ) -> None:
        self.snapshot = snapshot
        self.policy = policy
        self.grid = policy.grid
        self.should_stop = should_stop
        self.assignments = list(assignments)
        self.index = OccupancyIndex.from_assignments(self.assignments)
        self.staff_load: Counter[str] = Counter(assignment.staff_id for assignment in self.assignments)
        self.added = 0

    def run(self) -> DensifyResult:
        for section in self.snapshot.sections:
            if section.semester != self.snapshot.semester:
                continue
            pool = self.snapshot.department_pool(section)
            if not pool:
                logger.debug("No subjects to densify section %s with", section.name)
                continue
            self._densify_section(section, pool)

        assert_conflict_free(self.assignments)
        if self.added:
            logger.info("Densifier added %s assignment(s) to reach %s per day", self.added, self.policy.min_classes_per_day)
        return DensifyResult(assignments=self.assignments, added=self.added)

    def _densify_section(self, section: SectionRecord, pool: list[SubjectRecord]) -> None:
        cursor = 0
        for day in self.grid.day_range:
            raise_if_cancelled(self.should_stop)
            for slot in self.grid.slot_range:
                if self.index.section_day_count(section.id, day) >= self.policy.min_classes_per_day:
                    break
                if not self.index.section_free(section.id, day, slot):
                    continue
                for offset in range(len(pool)):
                    subject = pool[(cursor + offset) % len(pool)]
                    if self._try_place(section, subject, day, slot):
                        cursor = (cursor + offset + 1) % len(pool)
                        break

    def _try_place(self, section: SectionRecord, subject: SubjectRecord, day: int, slot: int) -> bool:
        block_size = self.policy.lab_block_size if subject.is_block else 1
        if block_size > 1 and (slot % 2 == 0 or slot + block_size - 1 > self.grid.slots):
            return False
        slots = block_slots(slot, block_size)
        if not self.index.block_free_for_section(section.id, day, slots):
            return False

        staff = sorted(
            self.snapshot.eligible_staff(subject, section.department_id),
            key=lambda member: self.staff_load[member.id],
        )
        pair = self.index.find_free_pair(staff, self.snapshot.rooms_for(subject), day, slots)
        if pair is None:
            return False

        member, room = pair
        for block_slot in slots:
            self._add(section, subject, member, room.id, day, block_slot)
        return True

    def _add(self, section: SectionRecord, subject: SubjectRecord, member: StaffRecord, room_id: str, day: int, slot: int) -> None:
        assignment = Assignment(
            section_id=section.id,
            subject_id=subject.id,
            staff_id=member.id,
            room_id=room_id,
            day=day,
            slot=slot,
            semester=self.snapshot.semester,
        )
        self.index.reserve(assignment)
        self.assignments.append(assignment)
        self.staff_load[member.id] += 1
        self.added += 1


def densify(
    assignments: Sequence[Assignment],
    snapshot: EntitySnapshot,
    policy: SchedulingPolicy,
    *,
    should_stop: CancelCheck | None = None,
) -> DensifyResult:
    """Top up every section/day below ``policy.min_classes_per_day``.

    Existing assignments are kept untouched, so the result is always a
    superset of ``assignments``. Subjects may repeat within the week.
    """
    return _Densifier(assignments, snapshot, policy, should_stop).run()
