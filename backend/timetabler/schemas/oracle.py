from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class OracleCandidate(BaseModel):
    """One proposed timetable row as the oracle is asked to emit it."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    section_id: str = Field(min_length=1, max_length=36)
    subject_id: str = Field(min_length=1, max_length=36)
    staff_id: str = Field(min_length=1, max_length=36)
    room_id: str = Field(min_length=1, max_length=36)
    day_of_week: int
    time_slot: int
    semester: int


class OracleSectionRow(BaseModel):
    section_id: str
    section_name: str
    department_id: str


class OracleSubjectRow(BaseModel):
    id: str
    code: str
    name: str
    hours_per_week: int
    subject_type: str
    department_id: str | None = None


class OracleStaffRow(BaseModel):
    id: str
    name: str
    department_id: str
    max_hours_per_week: int


class OracleRoomRow(BaseModel):
    id: str
    room_number: str
    capacity: int
    room_type: str


class OracleEligibilityRow(BaseModel):
    staff_id: str
    subject_id: str


class OracleTimingRow(BaseModel):
    day_of_week: int
    start_time: str
    end_time: str
    break_start: str | None = None
    break_end: str | None = None
    lunch_start: str | None = None
    lunch_end: str | None = None


class OraclePromptData(BaseModel):
    """Entity snapshot as handed to the oracle: ids and display attributes only."""

    semester: int
    days: int
    slots: int
    sections: list[OracleSectionRow] = Field(default_factory=list)
    subjects: list[OracleSubjectRow] = Field(default_factory=list)
    staff: list[OracleStaffRow] = Field(default_factory=list)
    rooms: list[OracleRoomRow] = Field(default_factory=list)
    staff_subjects: list[OracleEligibilityRow] = Field(default_factory=list)
    timings: list[OracleTimingRow] = Field(default_factory=list)
