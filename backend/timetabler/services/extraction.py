"""Pull structured data out of free-form oracle text.

The oracle is asked for bare JSON but routinely wraps it in prose or code
fences, nests the array under a key, or emits loose objects with no enclosing
array. Extraction therefore tries progressively looser strategies and is a
pure function of its input.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from timetabler.core.exceptions import ExtractionError
from timetabler.schemas.oracle import OracleCandidate
from timetabler.services.entities import Assignment

logger = logging.getLogger(__name__)

CODE_FENCE_PATTERN = re.compile(r"```[A-Za-z]*")
WELL_KNOWN_ARRAY_KEYS = ("timetable", "entries", "schedule", "data", "result", "results", "items", "output")
SNIPPET_LENGTH = 200


def strip_code_fences(text: str) -> str:
    return CODE_FENCE_PATTERN.sub("", text).strip()


def _matching_close(text: str, start: int, opener: str, closer: str) -> int | None:
    """Index of the bracket closing ``text[start]``, ignoring brackets inside strings."""
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return index
    return None


def _loads(fragment: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(fragment)
    except (ValueError, RecursionError):
        return False, None


def _first_balanced(text: str, opener: str, closer: str, expected: type) -> Any | None:
    start = text.find(opener)
    while start != -1:
        end = _matching_close(text, start, opener, closer)
        if end is not None:
            ok, value = _loads(text[start : end + 1])
            if ok and isinstance(value, expected):
                return value
        start = text.find(opener, start + 1)
    return None


def _array_from_wrapper(text: str) -> list | None:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    ok, wrapper = _loads(text[start : end + 1])
    if not ok or not isinstance(wrapper, dict):
        return None
    for key in WELL_KNOWN_ARRAY_KEYS:
        if isinstance(wrapper.get(key), list):
            return wrapper[key]
    for value in wrapper.values():
        if isinstance(value, list) and value:
            return value
    return None


def _top_level_objects(text: str) -> list[dict]:
    objects: list[dict] = []
    index = 0
    while index < len(text):
        if text[index] == '"':
            # Skip string literals between objects.
            index = _skip_string(text, index)
            continue
        if text[index] == "{":
            end = _matching_close(text, index, "{", "}")
            if end is None:
                break
            ok, value = _loads(text[index : end + 1])
            if ok and isinstance(value, dict):
                objects.append(value)
            index = end + 1
            continue
        index += 1
    return objects


def _skip_string(text: str, start: int) -> int:
    escaped = False
    for index in range(start + 1, len(text)):
        char = text[index]
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            return index + 1
    return len(text)


def _snippet(text: str) -> str:
    return text[:SNIPPET_LENGTH].replace("\n", " ")


def extract_json_array(text: str) -> list:
    cleaned = strip_code_fences(text or "")

    ok, value = _loads(cleaned)
    if ok and isinstance(value, list):
        return value

    value = _first_balanced(cleaned, "[", "]", list)
    if value is not None:
        return value

    value = _array_from_wrapper(cleaned)
    if value is not None:
        logger.debug("Recovered oracle array from wrapper object")
        return value

    objects = _top_level_objects(cleaned)
    if objects:
        logger.debug("Recovered %s loose oracle objects without an enclosing array", len(objects))
        return objects

    raise ExtractionError("No valid JSON array found in oracle response", snippet=_snippet(cleaned))


def extract_json_object(text: str) -> dict:
    cleaned = strip_code_fences(text or "")

    ok, value = _loads(cleaned)
    if ok and isinstance(value, dict):
        return value

    value = _first_balanced(cleaned, "{", "}", dict)
    if value is not None:
        return value

    raise ExtractionError("No valid JSON object found in oracle response", snippet=_snippet(cleaned))


@dataclass(frozen=True)
class ParsedCandidate:
    index: int
    assignment: Assignment


@dataclass(frozen=True)
class CandidateRejection:
    index: int
    reason: str


def parse_candidate(index: int, record: Any) -> ParsedCandidate | CandidateRejection:
    if not isinstance(record, dict):
        return CandidateRejection(index=index, reason=f"expected an object, got {type(record).__name__}")
    try:
        candidate = OracleCandidate.model_validate(record)
    except ValidationError as exc:
        fields = sorted({".".join(str(part) for part in error["loc"]) for error in exc.errors()})
        return CandidateRejection(index=index, reason=f"invalid field(s): {', '.join(fields)}")
    return ParsedCandidate(
        index=index,
        assignment=Assignment(
            section_id=candidate.section_id,
            subject_id=candidate.subject_id,
            staff_id=candidate.staff_id,
            room_id=candidate.room_id,
            day=candidate.day_of_week,
            slot=candidate.time_slot,
            semester=candidate.semester,
        ),
    )
