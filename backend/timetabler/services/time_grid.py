from __future__ import annotations

from dataclasses import dataclass

from timetabler.core.config import Settings

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# Five teaching periods with the morning break between periods 2 and 3.
MBU_PERIOD_LABELS = (
    "08:00-08:55",
    "08:55-09:50",
    "10:15-11:10",
    "11:10-12:05",
    "12:05-13:00",
)

GENERIC_PERIOD_LABELS = (
    "09:00-10:00",
    "10:15-11:15",
    "11:15-12:15",
    "13:15-14:00",
    "14:00-14:45",
    "15:00-16:00",
    "16:00-17:00",
)


@dataclass(frozen=True)
class TimeGrid:
    days: int = 6
    slots: int = 5

    def __post_init__(self) -> None:
        if not 1 <= self.days <= len(DAY_NAMES):
            raise ValueError(f"days must be between 1 and {len(DAY_NAMES)}")
        if self.slots < 1:
            raise ValueError("slots must be positive")

    @property
    def day_range(self) -> range:
        return range(1, self.days + 1)

    @property
    def slot_range(self) -> range:
        return range(1, self.slots + 1)

    def contains(self, day: int, slot: int) -> bool:
        return 1 <= day <= self.days and 1 <= slot <= self.slots

    def coordinates(self) -> list[tuple[int, int]]:
        return [(day, slot) for day in self.day_range for slot in self.slot_range]

    def block_starts(self, block_size: int) -> list[tuple[int, int]]:
        """Valid first slots for a block of ``block_size`` contiguous periods.

        Multi-slot blocks start on odd periods (1-2, 3-4, ...) and must end
        inside the day.
        """
        if block_size <= 1:
            return self.coordinates()
        return [
            (day, slot)
            for day, slot in self.coordinates()
            if slot % 2 == 1 and slot + block_size - 1 <= self.slots
        ]

    def day_name(self, day: int) -> str:
        return DAY_NAMES[day - 1]

    def slot_label(self, slot: int) -> str:
        if self.slots == len(MBU_PERIOD_LABELS):
            return MBU_PERIOD_LABELS[slot - 1]
        if self.slots == len(GENERIC_PERIOD_LABELS):
            return GENERIC_PERIOD_LABELS[slot - 1]
        return f"P{slot}"


@dataclass(frozen=True)
class SchedulingPolicy:
    grid: TimeGrid = TimeGrid()
    min_classes_per_day: int = 3
    lab_block_size: int = 2
    max_placement_attempts: int = 500
    # Placements of one subject after which candidates are scanned in
    # ascending (day, slot) order instead of shuffled. A failed scan ends the
    # subject, so only successful placements count towards it.
    deterministic_scan_after: int = 50
    fill_free_periods: bool = True
    internship_from_semester: int = 7

    @classmethod
    def from_settings(cls, settings: Settings) -> "SchedulingPolicy":
        return cls(
            grid=TimeGrid(days=settings.days_per_week, slots=settings.slots_per_day),
            min_classes_per_day=settings.min_classes_per_day,
            lab_block_size=settings.lab_block_size,
            max_placement_attempts=settings.max_placement_attempts,
            deterministic_scan_after=settings.deterministic_scan_after,
            fill_free_periods=settings.fill_free_periods,
            internship_from_semester=settings.internship_from_semester,
        )
