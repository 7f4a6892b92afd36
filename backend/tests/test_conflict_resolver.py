import pytest

from timetabler.core.exceptions import InternalInvariantError
from timetabler.services.conflict_resolver import assert_conflict_free, resolve_candidates
from timetabler.services.entities import Assignment
from timetabler.services.time_grid import TimeGrid

GRID = TimeGrid(days=6, slots=5)


def candidate(section="s1", staff="t1", room="r1", day=1, slot=1, semester=3, subject="m1"):
    return {
        "section_id": section,
        "subject_id": subject,
        "staff_id": staff,
        "room_id": room,
        "day_of_week": day,
        "time_slot": slot,
        "semester": semester,
    }


def test_first_occurrence_wins_on_staff_clash():
    first = candidate(section="s1", room="r1")
    second = candidate(section="s2", room="r2")

    report = resolve_candidates([first, second], semester=3, grid=GRID)
    assert [item.section_id for item in report.assignments] == ["s1"]
    assert report.conflict_count == 1

    reversed_report = resolve_candidates([second, first], semester=3, grid=GRID)
    assert [item.section_id for item in reversed_report.assignments] == ["s2"]


def test_room_and_section_clashes_are_discarded():
    records = [
        candidate(section="s1", staff="t1", room="r1"),
        candidate(section="s2", staff="t2", room="r1"),
        candidate(section="s1", staff="t3", room="r3"),
        candidate(section="s1", staff="t1", room="r1", slot=2),
    ]
    report = resolve_candidates(records, semester=3, grid=GRID)
    assert len(report.assignments) == 2
    assert report.conflict_count == 2
    assert report.total_proposed == 4


def test_invalid_records_are_counted_not_raised():
    records = [
        candidate(day=7),
        candidate(slot=6),
        candidate(semester=4),
        {"section_id": "s1"},
        "not a record",
        candidate(slot=3),
    ]
    report = resolve_candidates(records, semester=3, grid=GRID)
    assert report.invalid_count == 5
    assert report.discarded_count == 5
    assert len(report.assignments) == 1
    assert report.total_proposed == 6


def test_grid_size_is_respected():
    report = resolve_candidates([candidate(slot=7)], semester=3, grid=TimeGrid(days=6, slots=7))
    assert len(report.assignments) == 1


def test_resolved_assignments_have_unique_axes():
    records = [
        candidate(section=f"s{index % 3}", staff=f"t{index % 2}", room=f"r{index % 4}", day=1 + index % 2, slot=1 + index % 5)
        for index in range(40)
    ]
    report = resolve_candidates(records, semester=3, grid=GRID)
    assert_conflict_free(report.assignments)
    assert len(report.assignments) + report.conflict_count == 40


def test_assert_conflict_free_flags_duplicates():
    duplicate = [
        Assignment("s1", "m1", "t1", "r1", 1, 1, 3),
        Assignment("s2", "m1", "t2", "r1", 1, 1, 3),
    ]
    with pytest.raises(InternalInvariantError) as exc_info:
        assert_conflict_free(duplicate)
    assert exc_info.value.details["axis"] == "room"


def test_records_outside_snapshot_are_invalid(snapshot):
    def scoped(**overrides):
        values = {
            "section": "sec-a",
            "subject": "sub-math101",
            "staff": "staff-ravi",
            "room": "room-101",
        }
        values.update(overrides)
        return candidate(**values)

    records = [
        scoped(),
        scoped(section="sec-other", slot=2),
        scoped(subject="made-up", slot=3),
        scoped(staff="made-up", slot=4),
        scoped(room="made-up", slot=5),
    ]
    report = resolve_candidates(records, semester=3, grid=GRID, snapshot=snapshot)

    assert [item.section_id for item in report.assignments] == ["sec-a"]
    assert report.invalid_count == 4
    assert report.conflict_count == 0
