import os
import random
from dataclasses import dataclass

# Settings are read at import time; keep tests off real databases and the oracle.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["GEMINI_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from timetabler.api.deps import get_db, get_oracle, get_rng
from timetabler.db.base import Base
from timetabler.main import app
from timetabler.models import Department, Room, RoomType, Section, Staff, StaffSubject, Student, Subject, SubjectType
from timetabler.services.entities import (
    Eligibility,
    EntitySnapshot,
    RoomRecord,
    SectionRecord,
    StaffRecord,
    SubjectRecord,
)


@dataclass
class Scenario:
    department_id: str = "dept-cse"
    section_id: str = "sec-a"
    math_id: str = "sub-math101"
    lab_id: str = "sub-phylab01"
    library_id: str = "sub-library"
    staff_math_id: str = "staff-ravi"
    staff_lab_id: str = "staff-meena"
    classroom_id: str = "room-101"
    lab_room_id: str = "room-lab1"
    student_id: str = "stu-1"
    semester: int = 3


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def oracle_override():
    """Holder a test can fill with a stub oracle for the API."""
    return {"oracle": None}


@pytest.fixture()
def client(session_factory, oracle_override):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_oracle] = lambda: oracle_override["oracle"]
    app.dependency_overrides[get_rng] = lambda: random.Random(7)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def scenario(db_session) -> Scenario:
    """One department, one semester-3 section, MATH101 + PHYLAB01 and a library filler."""
    ids = Scenario()
    db_session.add_all(
        [
            Department(id=ids.department_id, name="Computer Science", code="CSE"),
            Section(id=ids.section_id, name="CSE-3A", department_id=ids.department_id, semester=ids.semester),
            Subject(
                id=ids.math_id,
                code="MATH101",
                name="Engineering Mathematics",
                department_id=ids.department_id,
                semester=ids.semester,
                hours_per_week=3,
                subject_type=SubjectType.theory,
            ),
            Subject(
                id=ids.lab_id,
                code="PHYLAB01",
                name="Physics Lab",
                department_id=ids.department_id,
                semester=ids.semester,
                hours_per_week=2,
                subject_type=SubjectType.lab,
            ),
            Subject(
                id=ids.library_id,
                code="LIB",
                name="Library Period",
                department_id=None,
                semester=1,
                hours_per_week=1,
                subject_type=SubjectType.theory,
            ),
            Staff(id=ids.staff_math_id, name="Ravi Kumar", department_id=ids.department_id, max_hours_per_week=18),
            Staff(id=ids.staff_lab_id, name="Meena Rao", department_id=ids.department_id, max_hours_per_week=18),
            StaffSubject(staff_id=ids.staff_math_id, subject_id=ids.math_id),
            StaffSubject(staff_id=ids.staff_lab_id, subject_id=ids.lab_id),
            Room(id=ids.classroom_id, room_number="101", capacity=60, room_type=RoomType.classroom),
            Room(id=ids.lab_room_id, room_number="LAB-1", capacity=30, room_type=RoomType.lab),
            Student(
                id=ids.student_id,
                name="Asha",
                roll_no="21CSE001",
                semester=ids.semester,
                department_id=ids.department_id,
                section_id=ids.section_id,
            ),
        ]
    )
    db_session.commit()
    return ids


@pytest.fixture()
def snapshot() -> EntitySnapshot:
    """In-memory version of the scenario without filler subjects."""
    ids = Scenario()
    return EntitySnapshot(
        semester=ids.semester,
        sections=(SectionRecord(id=ids.section_id, name="CSE-3A", department_id=ids.department_id, semester=3),),
        subjects=(
            SubjectRecord(
                id=ids.math_id,
                code="MATH101",
                name="Engineering Mathematics",
                department_id=ids.department_id,
                semester=3,
                hours_per_week=3,
                subject_type="theory",
            ),
            SubjectRecord(
                id=ids.lab_id,
                code="PHYLAB01",
                name="Physics Lab",
                department_id=ids.department_id,
                semester=3,
                hours_per_week=2,
                subject_type="lab",
            ),
        ),
        staff=(
            StaffRecord(id=ids.staff_math_id, name="Ravi Kumar", department_id=ids.department_id, max_hours_per_week=18),
            StaffRecord(id=ids.staff_lab_id, name="Meena Rao", department_id=ids.department_id, max_hours_per_week=18),
        ),
        rooms=(
            RoomRecord(id=ids.classroom_id, room_number="101", capacity=60, room_type="classroom"),
            RoomRecord(id=ids.lab_room_id, room_number="LAB-1", capacity=30, room_type="lab"),
        ),
        eligibility=(
            Eligibility(staff_id=ids.staff_math_id, subject_id=ids.math_id),
            Eligibility(staff_id=ids.staff_lab_id, subject_id=ids.lab_id),
        ),
        department_ids=(ids.department_id,),
    )


def assert_unique_axes(assignments) -> None:
    for key in ("section_key", "staff_key", "room_key"):
        keys = [getattr(item, key) for item in assignments]
        assert len(keys) == len(set(keys)), f"duplicate {key}"


def assert_lab_blocks(assignments, lab_subject_id: str) -> None:
    lab_rows = sorted(
        (item for item in assignments if item.subject_id == lab_subject_id),
        key=lambda item: (item.section_id, item.day, item.slot),
    )
    assert len(lab_rows) % 2 == 0
    for first, second in zip(lab_rows[::2], lab_rows[1::2]):
        assert first.day == second.day
        assert first.slot % 2 == 1
        assert second.slot == first.slot + 1
        assert (first.staff_id, first.room_id) == (second.staff_id, second.room_id)
