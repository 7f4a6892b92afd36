import random
from dataclasses import replace

import pytest

from conftest import Scenario, assert_lab_blocks, assert_unique_axes
from timetabler.core.exceptions import GenerationCancelledError
from timetabler.services.entities import SubjectRecord
from timetabler.services.fallback_scheduler import FallbackScheduler
from timetabler.services.time_grid import SchedulingPolicy, TimeGrid

IDS = Scenario()
NO_FILLER = SchedulingPolicy(fill_free_periods=False)


def build(snapshot, policy=NO_FILLER, seed=42, **kwargs):
    return FallbackScheduler(snapshot, policy, rng=random.Random(seed), **kwargs).build()


def test_math_and_lab_scenario(snapshot):
    result = build(snapshot)

    math = [item for item in result.assignments if item.subject_id == IDS.math_id]
    lab = [item for item in result.assignments if item.subject_id == IDS.lab_id]
    assert len(math) == 3
    assert len({item.day for item in math}) == 3
    assert all(item.staff_id == IDS.staff_math_id for item in math)

    assert len(lab) == 2
    assert {item.room_id for item in lab} == {IDS.lab_room_id}
    assert_lab_blocks(result.assignments, IDS.lab_id)
    assert_unique_axes(result.assignments)
    assert result.shortfalls == []
    assert all(item.semester == 3 for item in result.assignments)


def test_same_seed_reproduces_schedule(snapshot):
    assert build(snapshot, seed=11).assignments == build(snapshot, seed=11).assignments


def test_assignments_stay_inside_grid(snapshot):
    policy = SchedulingPolicy(grid=TimeGrid(days=5, slots=7), fill_free_periods=False)
    result = build(snapshot, policy=policy)
    assert all(1 <= item.day <= 5 and 1 <= item.slot <= 7 for item in result.assignments)
    assert_lab_blocks(result.assignments, IDS.lab_id)


def test_unplaceable_hours_are_reported(snapshot):
    heavy = SubjectRecord(
        id="sub-heavy",
        code="HEAVY",
        name="Heavy Theory",
        department_id=IDS.department_id,
        semester=3,
        hours_per_week=40,
    )
    result = build(replace(snapshot, subjects=(heavy,)))

    assert len(result.assignments) == 30
    [shortfall] = result.shortfalls
    assert shortfall.subject_code == "HEAVY"
    assert (shortfall.required_hours, shortfall.placed_hours, shortfall.missing_hours) == (40, 30, 10)


def test_lab_without_lab_room_is_skipped(snapshot):
    classrooms_only = tuple(room for room in snapshot.rooms if not room.is_lab)
    result = build(replace(snapshot, rooms=classrooms_only))

    assert not [item for item in result.assignments if item.subject_id == IDS.lab_id]
    [shortfall] = result.shortfalls
    assert shortfall.subject_id == IDS.lab_id
    assert shortfall.placed_hours == 0


def test_odd_lab_hours_round_up_to_whole_blocks(snapshot):
    lab = replace(snapshot.subjects[1], hours_per_week=3)
    result = build(replace(snapshot, subjects=(snapshot.subjects[0], lab)))
    assert len([item for item in result.assignments if item.subject_id == IDS.lab_id]) == 4
    assert_lab_blocks(result.assignments, IDS.lab_id)


def test_filler_fills_every_free_period(snapshot):
    library = SubjectRecord(
        id=IDS.library_id,
        code="LIB",
        name="Library Period",
        department_id=None,
        semester=1,
        hours_per_week=1,
    )
    result = build(replace(snapshot, filler_subjects=(library,)), policy=SchedulingPolicy())

    assert len(result.assignments) == 30
    assert result.filler_count == 25
    filler_rooms = {item.room_id for item in result.assignments if item.subject_id == IDS.library_id}
    assert filler_rooms == {IDS.classroom_id}
    assert_unique_axes(result.assignments)


def test_senior_sections_get_internship_filler(snapshot):
    internship = SubjectRecord(
        id="sub-intern",
        code="INT",
        name="Industry Internship",
        department_id=None,
        semester=7,
        hours_per_week=1,
    )
    library = replace(internship, id=IDS.library_id, code="LIB", name="Library Period")
    senior = replace(snapshot.sections[0], semester=7)
    result = build(
        replace(snapshot, sections=(senior,), filler_subjects=(library, internship)),
        policy=SchedulingPolicy(),
    )
    fillers = {item.subject_id for item in result.assignments} - {IDS.math_id, IDS.lab_id}
    assert fillers == {"sub-intern"}


def test_load_balancing_spreads_work_across_staff(snapshot):
    shared = replace(snapshot, eligibility=())
    result = build(shared)
    math_staff = {item.staff_id for item in result.assignments if item.subject_id == IDS.math_id}
    assert len(math_staff) == 2


def test_cancellation_stops_before_any_result(snapshot):
    with pytest.raises(GenerationCancelledError):
        build(snapshot, should_stop=lambda: True)


def test_placements_past_threshold_scan_in_ascending_order(snapshot):
    policy = SchedulingPolicy(fill_free_periods=False, deterministic_scan_after=0)

    for seed in (1, 99):
        result = build(snapshot, policy=policy, seed=seed)
        placed = sorted((item.day, item.slot, item.subject_id) for item in result.assignments)
        assert placed == [
            (1, 1, IDS.lab_id),
            (1, 2, IDS.lab_id),
            (1, 3, IDS.math_id),
            (1, 4, IDS.math_id),
            (1, 5, IDS.math_id),
        ]
