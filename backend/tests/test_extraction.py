import pytest

from timetabler.core.exceptions import ExtractionError
from timetabler.services.extraction import (
    CandidateRejection,
    ParsedCandidate,
    extract_json_array,
    extract_json_object,
    parse_candidate,
    strip_code_fences,
)


def test_array_inside_prose_and_code_fence():
    text = 'Here is the result:\n```json\n[{"a":1}]\n```\nThanks!'
    assert extract_json_array(text) == [{"a": 1}]


def test_loose_objects_without_enclosing_array():
    assert extract_json_array('{"x":1}, {"y":2}') == [{"x": 1}, {"y": 2}]


def test_direct_array_parse():
    assert extract_json_array('[{"day_of_week": 1}, {"day_of_week": 2}]') == [
        {"day_of_week": 1},
        {"day_of_week": 2},
    ]


def test_brackets_inside_strings_are_ignored():
    text = 'Answer: [{"note": "a ] tricky [ value", "quote": "say \\"hi]\\""}] done'
    assert extract_json_array(text) == [{"note": "a ] tricky [ value", "quote": 'say "hi]"'}]


def test_skips_unparseable_bracket_before_real_array():
    text = 'Periods [1-5] are used. Output: [{"slot": 3}]'
    assert extract_json_array(text) == [{"slot": 3}]


def test_wrapper_object_with_well_known_key():
    assert extract_json_array('{"timetable": [{"a": 1}], "notes": "fine"}') == [{"a": 1}]


def test_extraction_is_deterministic():
    text = 'prefix ```json\n{"x": 1} {"y": [1, 2]}\n``` suffix'
    assert extract_json_array(text) == extract_json_array(text)


def test_no_structured_data_raises():
    with pytest.raises(ExtractionError) as exc_info:
        extract_json_array("I could not build a timetable, sorry.")
    assert exc_info.value.details["snippet"].startswith("I could not")


def test_empty_text_raises():
    with pytest.raises(ExtractionError):
        extract_json_array("")


def test_oversized_integer_literal_raises_extraction_error():
    with pytest.raises(ExtractionError):
        extract_json_array("[" + "1" * 5000 + "]")


def test_oversized_integer_object_is_skipped():
    text = '{"day_of_week": 1} {"time_slot": ' + "9" * 5000 + "}"
    assert extract_json_array(text) == [{"day_of_week": 1}]


def test_object_mode_from_fenced_text():
    text = 'Sure!\n```json\n{"schedule": {"Monday": {}}}\n```'
    assert extract_json_object(text) == {"schedule": {"Monday": {}}}


def test_object_mode_picks_first_parseable_object():
    text = 'Draft {not json} final {"schedule": {"Tuesday": {"P1": null}}} end'
    assert extract_json_object(text) == {"schedule": {"Tuesday": {"P1": None}}}


def test_object_mode_rejects_bare_array():
    with pytest.raises(ExtractionError):
        extract_json_object("[1, 2, 3]")


def test_strip_code_fences():
    assert strip_code_fences("```json\n[]\n```") == "[]"
    assert strip_code_fences("```\n{}\n```") == "{}"


def test_parse_candidate_accepts_numeric_strings():
    parsed = parse_candidate(
        0,
        {
            "section_id": "s1",
            "subject_id": "m1",
            "staff_id": "t1",
            "room_id": "r1",
            "day_of_week": "2",
            "time_slot": 4,
            "semester": "3",
            "comment": "ignored",
        },
    )
    assert isinstance(parsed, ParsedCandidate)
    assert (parsed.assignment.day, parsed.assignment.slot, parsed.assignment.semester) == (2, 4, 3)


def test_parse_candidate_reports_missing_fields():
    rejection = parse_candidate(5, {"section_id": "s1", "day_of_week": 1})
    assert isinstance(rejection, CandidateRejection)
    assert rejection.index == 5
    assert "room_id" in rejection.reason
    assert "time_slot" in rejection.reason


def test_parse_candidate_rejects_non_objects():
    rejection = parse_candidate(1, ["s1", "m1"])
    assert isinstance(rejection, CandidateRejection)
    assert "list" in rejection.reason
