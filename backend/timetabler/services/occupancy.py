from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence

from timetabler.services.entities import Assignment, RoomRecord, StaffRecord


class OccupancyIndex:
    """Staff, room and section occupancy keyed by ``(id, day, slot)``.

    One index belongs to exactly one generation run.
    """

    def __init__(self) -> None:
        self.staff: set[tuple[str, int, int]] = set()
        self.rooms: set[tuple[str, int, int]] = set()
        self.sections: set[tuple[str, int, int]] = set()
        self._section_day_counts: Counter[tuple[str, int]] = Counter()

    @classmethod
    def from_assignments(cls, assignments: Iterable[Assignment]) -> "OccupancyIndex":
        index = cls()
        for assignment in assignments:
            index.reserve(assignment)
        return index

    def section_free(self, section_id: str, day: int, slot: int) -> bool:
        return (section_id, day, slot) not in self.sections

    def staff_free(self, staff_id: str, day: int, slot: int) -> bool:
        return (staff_id, day, slot) not in self.staff

    def room_free(self, room_id: str, day: int, slot: int) -> bool:
        return (room_id, day, slot) not in self.rooms

    def is_free(self, *, section_id: str, staff_id: str, room_id: str, day: int, slot: int) -> bool:
        return (
            self.section_free(section_id, day, slot)
            and self.staff_free(staff_id, day, slot)
            and self.room_free(room_id, day, slot)
        )

    def conflicts(self, assignment: Assignment) -> list[str]:
        axes: list[str] = []
        if assignment.staff_key in self.staff:
            axes.append("staff")
        if assignment.room_key in self.rooms:
            axes.append("room")
        if assignment.section_key in self.sections:
            axes.append("section")
        return axes

    def reserve(self, assignment: Assignment) -> None:
        self.staff.add(assignment.staff_key)
        self.rooms.add(assignment.room_key)
        self.sections.add(assignment.section_key)
        self._section_day_counts[(assignment.section_id, assignment.day)] += 1

    def section_day_count(self, section_id: str, day: int) -> int:
        return self._section_day_counts[(section_id, day)]

    def block_free_for_section(self, section_id: str, day: int, slots: Sequence[int]) -> bool:
        return all(self.section_free(section_id, day, slot) for slot in slots)

    def find_free_pair(
        self,
        staff: Sequence[StaffRecord],
        rooms: Sequence[RoomRecord],
        day: int,
        slots: Sequence[int],
    ) -> tuple[StaffRecord, RoomRecord] | None:
        """First staff member and room both free for every slot, in the given order."""
        for member in staff:
            if not all(self.staff_free(member.id, day, slot) for slot in slots):
                continue
            for room in rooms:
                if all(self.room_free(room.id, day, slot) for slot in slots):
                    return member, room
        return None
