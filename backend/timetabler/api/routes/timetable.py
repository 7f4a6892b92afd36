import logging
import random

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from timetabler.api.deps import get_db, get_oracle, get_policy, get_rng
from timetabler.schemas.generator import GenerationRequest, GenerationResult
from timetabler.schemas.timetable import SectionGrid
from timetabler.services.generation import TimetableGenerationService
from timetabler.services.oracle import TimetableOracle
from timetabler.services.section_grid import build_section_grid
from timetabler.services.student_timetable import StudentTimetableService
from timetabler.services.time_grid import SchedulingPolicy

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/generate", response_model=GenerationResult)
def generate_timetable(
    payload: GenerationRequest,
    response: Response,
    db: Session = Depends(get_db),
    policy: SchedulingPolicy = Depends(get_policy),
    oracle: TimetableOracle | None = Depends(get_oracle),
    rng: random.Random = Depends(get_rng),
) -> GenerationResult:
    logger.info(
        "Generation requested for semester %s, departments=%s, advanced=%s",
        payload.semester,
        payload.department_ids,
        payload.advanced_mode,
    )
    result = TimetableGenerationService(db, policy=policy, oracle=oracle, rng=rng).generate(payload)
    if not result.success:
        response.status_code = status.HTTP_400_BAD_REQUEST
    return result


@router.get("/sections/{section_id}", response_model=SectionGrid)
def get_section_timetable(
    section_id: str,
    db: Session = Depends(get_db),
    policy: SchedulingPolicy = Depends(get_policy),
) -> SectionGrid:
    return build_section_grid(db, section_id, policy.grid)


@router.post("/students/{student_id}", response_model=SectionGrid)
def generate_student_timetable(
    student_id: str,
    db: Session = Depends(get_db),
    policy: SchedulingPolicy = Depends(get_policy),
    oracle: TimetableOracle | None = Depends(get_oracle),
) -> SectionGrid:
    return StudentTimetableService(db, policy=policy, oracle=oracle).build(student_id)
