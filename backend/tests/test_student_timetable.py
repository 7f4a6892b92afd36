import json

from timetabler.core.exceptions import OracleError
from timetabler.models.student import Student


class StubOracle:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error

    def complete(self, prompt):
        if self.error:
            raise self.error
        return self.reply


def test_student_grid_falls_back_to_section(client, scenario):
    client.post(
        "/api/timetable/generate",
        json={"departmentIds": [scenario.department_id], "semester": scenario.semester},
    )

    response = client.post(f"/api/timetable/students/{scenario.student_id}")

    assert response.status_code == 200
    grid = response.json()
    assert grid["source"] == "section"
    assert grid["sectionId"] == scenario.section_id
    assert grid["summary"]["totalClasses"] == 30


def test_student_grid_from_oracle_object(client, scenario, oracle_override):
    reply = {
        "schedule": {
            "Monday": {
                "08:00-08:55": {
                    "subject": "Engineering Mathematics",
                    "code": "MATH101",
                    "staff": "Ravi Kumar",
                    "room": "101",
                    "type": "theory",
                },
                "08:55-09:50": None,
            }
        },
        "summary": {"total_classes": 99, "subjects_covered": ["Engineering Mathematics"]},
    }
    oracle_override["oracle"] = StubOracle(reply="Personal plan:\n```json\n" + json.dumps(reply) + "\n```")

    response = client.post(f"/api/timetable/students/{scenario.student_id}")

    assert response.status_code == 200
    grid = response.json()
    assert grid["source"] == "oracle"
    cell = grid["schedule"]["Monday"]["08:00-08:55"]
    assert cell["subjectCode"] == "MATH101"
    assert cell["subjectType"] == "theory"
    assert grid["summary"]["totalClasses"] == 1


def test_invalid_oracle_object_uses_section_grid(client, scenario, oracle_override):
    oracle_override["oracle"] = StubOracle(reply='{"plan": "empty"}')

    response = client.post(f"/api/timetable/students/{scenario.student_id}")

    assert response.status_code == 200
    assert response.json()["source"] == "section"


def test_oracle_error_uses_section_grid(client, scenario, oracle_override):
    oracle_override["oracle"] = StubOracle(error=OracleError("Oracle returned an empty response"))

    response = client.post(f"/api/timetable/students/{scenario.student_id}")

    assert response.json()["source"] == "section"


def test_student_without_section_and_oracle(client, scenario, db_session):
    db_session.add(
        Student(
            id="stu-2",
            name="Kiran",
            roll_no="21CSE002",
            semester=scenario.semester,
            department_id=scenario.department_id,
        )
    )
    db_session.commit()

    response = client.post("/api/timetable/students/stu-2")

    assert response.status_code == 400
    assert "21CSE002" in response.json()["message"]


def test_unknown_student(client, scenario):
    response = client.post("/api/timetable/students/nobody")
    assert response.status_code == 404
