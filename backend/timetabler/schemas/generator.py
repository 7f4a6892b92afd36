from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


GenerationSource = Literal["oracle", "fallback", "none"]


class GenerationRequest(BaseModel):
    department_ids: list[str] = Field(default_factory=list, alias="departmentIds")
    semester: int = Field(ge=1, le=8)
    section_ids: list[str] | None = Field(default=None, alias="sectionIds")
    subject_ids: list[str] | None = Field(default=None, alias="subjectIds")
    staff_ids: list[str] | None = Field(default=None, alias="staffIds")
    room_ids: list[str] | None = Field(default=None, alias="roomIds")
    advanced_mode: bool = Field(default=False, alias="advancedMode")
    use_oracle: bool = Field(default=True, alias="useOracle")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("department_ids", "section_ids", "subject_ids", "staff_ids", "room_ids")
    @classmethod
    def dedupe_ids(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        cleaned: list[str] = []
        for item in value:
            item = item.strip()
            if item and item not in cleaned:
                cleaned.append(item)
        return cleaned


class ShortfallOut(BaseModel):
    section_id: str = Field(alias="sectionId")
    subject_id: str = Field(alias="subjectId")
    subject_code: str = Field(alias="subjectCode")
    required_hours: int = Field(alias="requiredHours")
    placed_hours: int = Field(alias="placedHours")

    model_config = ConfigDict(populate_by_name=True)


class GenerationResult(BaseModel):
    success: bool
    entries_count: int = Field(default=0, alias="entriesCount")
    total_proposed: int = Field(default=0, alias="totalProposed")
    error: str | None = None
    source: GenerationSource = "none"
    fallback_reason: str | None = Field(default=None, alias="fallbackReason")
    discarded_count: int = Field(default=0, alias="discardedCount")
    densified_count: int = Field(default=0, alias="densifiedCount")
    shortfalls: list[ShortfallOut] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)
