from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class GridCell(BaseModel):
    subject_id: str | None = Field(default=None, alias="subjectId")
    subject: str
    subject_code: str | None = Field(
        default=None,
        validation_alias=AliasChoices("subjectCode", "subject_code", "code"),
        serialization_alias="subjectCode",
    )
    staff: str | None = None
    room: str | None = None
    subject_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("subjectType", "subject_type", "type"),
        serialization_alias="subjectType",
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def is_lab(self) -> bool:
        return (self.subject_type or "").lower() in {"lab", "practical"}


class GridSummary(BaseModel):
    total_classes: int = Field(default=0, alias="totalClasses")
    lab_sessions: int = Field(default=0, alias="labSessions")
    theory_classes: int = Field(default=0, alias="theoryClasses")
    free_periods: int = Field(default=0, alias="freePeriods")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SectionGrid(BaseModel):
    """Weekly grid keyed by day name, then period label."""

    section_id: str | None = Field(default=None, alias="sectionId")
    section_name: str | None = Field(default=None, alias="sectionName")
    semester: int | None = None
    periods: list[str] = Field(default_factory=list)
    schedule: dict[str, dict[str, GridCell | None]] = Field(min_length=1)
    summary: GridSummary = Field(default_factory=GridSummary)
    source: str = "timetable"

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def recount(self) -> "SectionGrid":
        cells = [cell for day in self.schedule.values() for cell in day.values()]
        booked = [cell for cell in cells if cell is not None]
        labs = sum(1 for cell in booked if cell.is_lab)
        slots_per_day = len(self.periods) or max((len(day) for day in self.schedule.values()), default=0)
        self.summary = GridSummary(
            total_classes=len(booked),
            lab_sessions=labs,
            theory_classes=len(booked) - labs,
            free_periods=max(0, slots_per_day * len(self.schedule) - len(booked)),
        )
        return self
