def generate(client, scenario, **overrides):
    payload = {"departmentIds": [scenario.department_id], "semester": scenario.semester}
    payload.update(overrides)
    return client.post("/api/timetable/generate", json=payload)


def test_generate_endpoint_returns_camel_case_result(client, scenario):
    response = generate(client, scenario)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["source"] == "fallback"
    assert body["entriesCount"] == 30
    assert body["totalProposed"] == 30
    assert body["densifiedCount"] == 0
    assert body["shortfalls"] == []


def test_generate_reports_scope_failure_as_bad_request(client, scenario):
    response = generate(client, scenario, semester=6)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "No sections" in body["error"]


def test_generate_validates_semester(client, scenario):
    response = generate(client, scenario, semester=0)
    assert response.status_code == 422


def test_section_grid_after_generation(client, scenario):
    generate(client, scenario)

    response = client.get(f"/api/timetable/sections/{scenario.section_id}")

    assert response.status_code == 200
    grid = response.json()
    assert grid["sectionName"] == "CSE-3A"
    assert list(grid["schedule"]) == ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
    assert grid["periods"][0] == "08:00-08:55"
    assert grid["summary"]["totalClasses"] == 30
    assert grid["summary"]["labSessions"] == 2
    assert grid["summary"]["freePeriods"] == 0
    codes = {
        cell["subjectCode"]
        for day in grid["schedule"].values()
        for cell in day.values()
        if cell is not None
    }
    assert codes == {"MATH101", "PHYLAB01", "LIB"}


def test_section_grid_for_unknown_section(client, scenario):
    response = client.get("/api/timetable/sections/missing")

    assert response.status_code == 404
    assert response.json()["message"] == "Section with id missing not found"
