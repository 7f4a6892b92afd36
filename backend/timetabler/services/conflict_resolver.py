from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from timetabler.core.exceptions import InternalInvariantError
from timetabler.services.entities import Assignment, EntitySnapshot
from timetabler.services.extraction import CandidateRejection, parse_candidate
from timetabler.services.occupancy import OccupancyIndex
from timetabler.services.time_grid import TimeGrid

logger = logging.getLogger(__name__)


@dataclass
class ResolutionReport:
    assignments: list[Assignment] = field(default_factory=list)
    total_proposed: int = 0
    invalid_count: int = 0
    conflict_count: int = 0

    @property
    def discarded_count(self) -> int:
        return self.invalid_count + self.conflict_count


def resolve_candidates(
    records: Sequence[Any],
    *,
    semester: int,
    grid: TimeGrid,
    snapshot: EntitySnapshot | None = None,
) -> ResolutionReport:
    """Reduce raw oracle records to a conflict-free assignment list.

    Records are considered in their original order and the first record to
    claim a staff, room or section slot keeps it. With a snapshot, records
    naming a section, subject, staff member or room outside it are invalid.
    """
    report = ResolutionReport(total_proposed=len(records))
    index = OccupancyIndex()
    invalid_reasons: Counter[str] = Counter()
    conflict_axes: Counter[str] = Counter()

    for position, record in enumerate(records):
        parsed = parse_candidate(position, record)
        if isinstance(parsed, CandidateRejection):
            invalid_reasons[parsed.reason] += 1
            continue

        assignment = parsed.assignment
        if not grid.contains(assignment.day, assignment.slot):
            invalid_reasons["outside time grid"] += 1
            continue
        if assignment.semester != semester:
            invalid_reasons[f"semester {assignment.semester} != {semester}"] += 1
            continue
        if snapshot is not None:
            unknown = _out_of_scope(assignment, snapshot)
            if unknown:
                invalid_reasons[f"unknown {unknown}"] += 1
                continue

        axes = index.conflicts(assignment)
        if axes:
            conflict_axes.update(axes)
            report.conflict_count += 1
            continue

        index.reserve(assignment)
        report.assignments.append(assignment)

    report.invalid_count = sum(invalid_reasons.values())
    if report.invalid_count:
        logger.warning(
            "Discarded %s invalid oracle candidate(s): %s",
            report.invalid_count,
            "; ".join(f"{reason} x{count}" for reason, count in invalid_reasons.most_common()),
        )
    if report.conflict_count:
        logger.warning(
            "Discarded %s conflicting oracle candidate(s); clashes by axis: %s",
            report.conflict_count,
            ", ".join(f"{axis}={count}" for axis, count in sorted(conflict_axes.items())),
        )

    assert_conflict_free(report.assignments)
    logger.info(
        "Resolved %s of %s oracle candidates into assignments",
        len(report.assignments),
        report.total_proposed,
    )
    return report


def _out_of_scope(assignment: Assignment, snapshot: EntitySnapshot) -> str | None:
    if assignment.section_id not in snapshot.sections_by_id:
        return "section"
    if assignment.subject_id not in snapshot.subjects_by_id:
        return "subject"
    if assignment.staff_id not in snapshot.staff_by_id:
        return "staff"
    if assignment.room_id not in snapshot.rooms_by_id:
        return "room"
    return None


def assert_conflict_free(assignments: Iterable[Assignment]) -> None:
    seen: dict[str, set[tuple[str, int, int]]] = {"section": set(), "staff": set(), "room": set()}
    for assignment in assignments:
        keys = {
            "section": assignment.section_key,
            "staff": assignment.staff_key,
            "room": assignment.room_key,
        }
        for axis, key in keys.items():
            if key in seen[axis]:
                raise InternalInvariantError(
                    f"Duplicate {axis} occupancy survived conflict resolution",
                    details={"axis": axis, "id": key[0], "day": key[1], "slot": key[2]},
                )
            seen[axis].add(key)
