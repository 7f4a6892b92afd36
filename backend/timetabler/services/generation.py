from __future__ import annotations

import logging
import random
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from timetabler.core.exceptions import AppError, ExtractionError, InternalInvariantError, OracleError
from timetabler.schemas.generator import GenerationRequest, GenerationResult, GenerationSource, ShortfallOut
from timetabler.services.conflict_resolver import resolve_candidates
from timetabler.services.densifier import densify
from timetabler.services.entities import Assignment, EntitySnapshot
from timetabler.services.entity_repository import EntityRepository
from timetabler.services.extraction import extract_json_array
from timetabler.services.fallback_scheduler import CancelCheck, FallbackScheduler, HoursShortfall
from timetabler.services.oracle import TimetableOracle, build_generation_prompt
from timetabler.services.time_grid import SchedulingPolicy
from timetabler.services.timetable_writer import TimetableWriter

logger = logging.getLogger(__name__)


@dataclass
class _Proposal:
    source: GenerationSource
    assignments: list[Assignment]
    total_proposed: int = 0
    discarded_count: int = 0
    fallback_reason: str | None = None
    shortfalls: list[HoursShortfall] = field(default_factory=list)


def hours_shortfalls(assignments: Sequence[Assignment], snapshot: EntitySnapshot) -> list[HoursShortfall]:
    placed = Counter((assignment.section_id, assignment.subject_id) for assignment in assignments)
    shortfalls: list[HoursShortfall] = []
    for section in snapshot.sections:
        for subject in snapshot.subjects_for_section(section):
            count = placed[(section.id, subject.id)]
            if count < subject.hours_per_week:
                shortfalls.append(
                    HoursShortfall(
                        section_id=section.id,
                        subject_id=subject.id,
                        subject_code=subject.code,
                        required_hours=subject.hours_per_week,
                        placed_hours=count,
                    )
                )
    return shortfalls


class TimetableGenerationService:
    """Runs one generation: scope, oracle or fallback, densify, then store.

    The oracle and fallback paths are alternatives; their assignments are
    never merged. Nothing is written unless the whole pipeline completes.
    Concurrent runs over overlapping sections, staff or rooms must be
    serialised by the caller.
    """

    def __init__(
        self,
        db: Session,
        *,
        policy: SchedulingPolicy,
        oracle: TimetableOracle | None = None,
        rng: random.Random | None = None,
        should_stop: CancelCheck | None = None,
    ) -> None:
        self.db = db
        self.policy = policy
        self.oracle = oracle
        self.random = rng or random.Random()
        self.should_stop = should_stop

    def generate(self, request: GenerationRequest) -> GenerationResult:
        try:
            return self._generate(request)
        except InternalInvariantError:
            logger.exception("Timetable generation produced a conflicting assignment set")
            raise
        except AppError as exc:
            logger.warning("Timetable generation failed: %s", exc.message)
            return GenerationResult(success=False, error=exc.message)

    def _generate(self, request: GenerationRequest) -> GenerationResult:
        snapshot = EntityRepository(self.db).load_scope(request)

        proposal = self._propose_with_oracle(snapshot) if request.use_oracle else None
        if proposal is None or proposal.source != "oracle":
            reason = proposal.fallback_reason if proposal else "Oracle disabled for this request"
            proposal = self._propose_with_fallback(snapshot, reason=reason, previous=proposal)

        densified = densify(proposal.assignments, snapshot, self.policy, should_stop=self.should_stop)
        section_ids = [section.id for section in snapshot.sections]
        report = TimetableWriter(self.db).replace_sections(section_ids, densified.assignments)

        logger.info(
            "Generated %s entries for semester %s via %s (%s densified)",
            report.written,
            snapshot.semester,
            proposal.source,
            densified.added,
        )
        return GenerationResult(
            success=True,
            entries_count=report.written,
            total_proposed=proposal.total_proposed,
            source=proposal.source,
            fallback_reason=proposal.fallback_reason,
            discarded_count=proposal.discarded_count,
            densified_count=densified.added,
            shortfalls=[
                ShortfallOut(
                    section_id=item.section_id,
                    subject_id=item.subject_id,
                    subject_code=item.subject_code,
                    required_hours=item.required_hours,
                    placed_hours=item.placed_hours,
                )
                for item in proposal.shortfalls
            ],
        )

    def _propose_with_oracle(self, snapshot: EntitySnapshot) -> _Proposal:
        if self.oracle is None:
            return _Proposal(source="none", assignments=[], fallback_reason="No oracle configured")

        try:
            text = self.oracle.complete(build_generation_prompt(snapshot, self.policy))
            records = extract_json_array(text)
        except (OracleError, ExtractionError) as exc:
            logger.warning("Oracle output unusable: %s", exc.message)
            return _Proposal(source="none", assignments=[], fallback_reason=exc.message)

        report = resolve_candidates(
            records,
            semester=snapshot.semester,
            grid=self.policy.grid,
            snapshot=snapshot,
        )
        if not report.assignments:
            return _Proposal(
                source="none",
                assignments=[],
                total_proposed=report.total_proposed,
                discarded_count=report.discarded_count,
                fallback_reason="Oracle proposed no valid assignments",
            )
        return _Proposal(
            source="oracle",
            assignments=report.assignments,
            total_proposed=report.total_proposed,
            discarded_count=report.discarded_count,
            shortfalls=hours_shortfalls(report.assignments, snapshot),
        )

    def _propose_with_fallback(
        self,
        snapshot: EntitySnapshot,
        *,
        reason: str | None,
        previous: _Proposal | None,
    ) -> _Proposal:
        logger.info("Using fallback scheduler: %s", reason)
        result = FallbackScheduler(
            snapshot,
            self.policy,
            rng=self.random,
            should_stop=self.should_stop,
        ).build()
        return _Proposal(
            source="fallback",
            assignments=result.assignments,
            total_proposed=len(result.assignments),
            discarded_count=previous.discarded_count if previous else 0,
            fallback_reason=reason,
            shortfalls=result.shortfalls,
        )
