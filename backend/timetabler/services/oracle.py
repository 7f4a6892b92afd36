from __future__ import annotations

import logging
from typing import Protocol

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from timetabler.core.config import Settings
from timetabler.core.exceptions import OracleError
from timetabler.schemas.oracle import (
    OracleEligibilityRow,
    OraclePromptData,
    OracleRoomRow,
    OracleSectionRow,
    OracleStaffRow,
    OracleSubjectRow,
    OracleTimingRow,
)
from timetabler.services.entities import EntitySnapshot
from timetabler.services.time_grid import SchedulingPolicy

logger = logging.getLogger(__name__)


class TimetableOracle(Protocol):
    def complete(self, prompt: str) -> str:
        ...


class GeminiOracle:
    """Gemini-backed oracle. Output is untrusted text and must be extracted."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        temperature: float = 0.1,
        max_output_tokens: int = 8192,
        client: genai.Client | None = None,
    ) -> None:
        self.client = client or genai.Client(api_key=api_key)
        self.model = model
        self.config = types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            response_mime_type="application/json",
        )

    def complete(self, prompt: str) -> str:
        logger.info("Requesting oracle completion from %s (%s prompt chars)", self.model, len(prompt))
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=self.config,
            )
        except (genai_errors.APIError, httpx.HTTPError) as exc:
            raise OracleError(f"Oracle request failed: {exc}") from exc

        text = response.text if response is not None else None
        if not text or not text.strip():
            raise OracleError("Oracle returned an empty response")
        logger.debug("Oracle response received (%s chars)", len(text))
        return text


def oracle_from_settings(settings: Settings) -> TimetableOracle | None:
    if not settings.gemini_api_key:
        logger.info("No oracle API key configured; generation will use the fallback scheduler")
        return None
    return GeminiOracle(
        api_key=settings.gemini_api_key,
        model=settings.oracle_model,
        temperature=settings.oracle_temperature,
        max_output_tokens=settings.oracle_max_output_tokens,
    )


def build_oracle_payload(snapshot: EntitySnapshot, policy: SchedulingPolicy) -> OraclePromptData:
    subjects = {subject.id: subject for subject in (*snapshot.subjects, *snapshot.filler_subjects)}
    return OraclePromptData(
        semester=snapshot.semester,
        days=policy.grid.days,
        slots=policy.grid.slots,
        sections=[
            OracleSectionRow(section_id=section.id, section_name=section.name, department_id=section.department_id)
            for section in snapshot.sections
        ],
        subjects=[
            OracleSubjectRow(
                id=subject.id,
                code=subject.code,
                name=subject.name,
                hours_per_week=subject.hours_per_week,
                subject_type=subject.subject_type,
                department_id=subject.department_id,
            )
            for subject in subjects.values()
        ],
        staff=[
            OracleStaffRow(
                id=member.id,
                name=member.name,
                department_id=member.department_id,
                max_hours_per_week=member.max_hours_per_week,
            )
            for member in snapshot.staff
        ],
        rooms=[
            OracleRoomRow(id=room.id, room_number=room.room_number, capacity=room.capacity, room_type=room.room_type)
            for room in snapshot.rooms
        ],
        staff_subjects=[
            OracleEligibilityRow(staff_id=pair.staff_id, subject_id=pair.subject_id) for pair in snapshot.eligibility
        ],
        timings=[
            OracleTimingRow(
                day_of_week=timing.day_of_week,
                start_time=timing.start_time,
                end_time=timing.end_time,
                break_start=timing.break_start,
                break_end=timing.break_end,
                lunch_start=timing.lunch_start,
                lunch_end=timing.lunch_end,
            )
            for timing in snapshot.timings
        ],
    )


def build_generation_prompt(snapshot: EntitySnapshot, policy: SchedulingPolicy) -> str:
    payload = build_oracle_payload(snapshot, policy)
    rules = "\n".join(
        [
            "Create a weekly university timetable from the data below.",
            f"Days are numbered 1-{policy.grid.days} (1 = Monday); periods are numbered 1-{policy.grid.slots}.",
            "A section, a staff member and a room can each hold at most one class per day and period.",
            "Every subject needs hours_per_week periods per section.",
            f"Lab and practical subjects take {policy.lab_block_size} consecutive periods starting on an odd "
            "period, in a lab room, with the same staff member.",
            "Only use staff listed in staff_subjects for a subject when such pairs exist.",
            f"Give every section at least {policy.min_classes_per_day} classes per day.",
            "Respond with a JSON array only. Each element must have the keys section_id, subject_id, staff_id, "
            "room_id, day_of_week, time_slot and semester, using the ids from the data.",
        ]
    )
    return f"{rules}\n\nDATA:\n{payload.model_dump_json()}"
