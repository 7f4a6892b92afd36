from __future__ import annotations

import json
import logging

from pydantic import ValidationError
from sqlalchemy.orm import Session

from timetabler.core.exceptions import (
    ExtractionError,
    OracleError,
    ResourceNotFoundError,
    SchedulerError,
    ScopeResolutionError,
)
from timetabler.models.student import Student
from timetabler.schemas.generator import GenerationRequest
from timetabler.schemas.timetable import SectionGrid
from timetabler.services.entity_repository import EntityRepository
from timetabler.services.extraction import extract_json_object
from timetabler.services.oracle import TimetableOracle, build_oracle_payload
from timetabler.services.section_grid import build_section_grid
from timetabler.services.time_grid import SchedulingPolicy

logger = logging.getLogger(__name__)


class StudentTimetableService:
    """Personal weekly grid for one student.

    The oracle is asked for a whole grid as a JSON object. When it is missing
    or its answer does not validate, the student's stored section grid is
    returned instead.
    """

    def __init__(self, db: Session, *, policy: SchedulingPolicy, oracle: TimetableOracle | None = None) -> None:
        self.db = db
        self.policy = policy
        self.oracle = oracle

    def build(self, student_id: str) -> SectionGrid:
        student = self.db.get(Student, student_id)
        if student is None:
            raise ResourceNotFoundError("Student", student_id)

        if self.oracle is not None:
            try:
                return self._from_oracle(student)
            except (OracleError, ExtractionError, ScopeResolutionError) as exc:
                logger.warning("Personal timetable for student %s falls back to section grid: %s", student.roll_no, exc.message)
            except ValidationError as exc:
                logger.warning(
                    "Personal timetable for student %s falls back to section grid: %s invalid field(s)",
                    student.roll_no,
                    exc.error_count(),
                )

        if not student.section_id:
            raise SchedulerError(
                f"Student {student.roll_no} has no section and no personal timetable could be generated",
            )
        return build_section_grid(self.db, student.section_id, self.policy.grid, source="section")

    def _from_oracle(self, student: Student) -> SectionGrid:
        request = GenerationRequest(
            department_ids=[student.department_id],
            semester=student.semester,
            section_ids=[student.section_id] if student.section_id else None,
            advanced_mode=bool(student.section_id),
        )
        snapshot = EntityRepository(self.db).load_scope(request)
        grid = self.policy.grid
        periods = [grid.slot_label(slot) for slot in grid.slot_range]
        days = [grid.day_name(day) for day in grid.day_range]
        prompt = "\n".join(
            [
                f"Create a personal weekly timetable for student {student.name} ({student.roll_no}), "
                f"semester {student.semester}.",
                f"Days: {', '.join(days)}. Periods: {', '.join(periods)}.",
                "Give every subject its hours_per_week, use lab rooms for lab and practical subjects, "
                "and only staff allowed to teach the subject.",
                'Respond with one JSON object: {"schedule": {"<day>": {"<period>": {"subject": ..., "code": ..., '
                '"staff": ..., "room": ..., "type": ...} or null}}}.',
                "",
                "DATA:",
                json.dumps(build_oracle_payload(snapshot, self.policy).model_dump(mode="json")),
            ]
        )
        payload = extract_json_object(self.oracle.complete(prompt))
        result = SectionGrid.model_validate(payload)
        result.section_id = student.section_id
        result.semester = student.semester
        result.periods = result.periods or periods
        result.source = "oracle"
        logger.info("Built personal timetable for student %s from oracle output", student.roll_no)
        return result.recount()
