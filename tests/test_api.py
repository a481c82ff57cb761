"""Tests for the HTTP endpoint."""

import pytest
from fastapi.testclient import TestClient

from shiftplanner.api.app import create_app
from shiftplanner.config import PlannerConfig
from shiftplanner.domain.types import GenerationResult
from shiftplanner.errors import PlanningIntegrityError


@pytest.fixture
def client(cfg):
    return TestClient(create_app(cfg))


def test_health(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "service": "shiftplanner"}


def test_generate_success(client, base_payload):
    response = client.post("/schedules/auto-generate", json=base_payload)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Planning generated successfully"
    assert body["planning"]["1"]["monday"] == [{"start": "08:00", "end": "16:00"}]
    assert body["planning"]["1"]["sunday"] == []
    assert body["metadata"]["weekNumber"] == 10
    assert body["metadata"]["employeeCount"] == 1
    assert body["stats"]["totalHoursPlanned"] == 40.0
    assert body["stats"]["employeesWithFullSchedule"] == 1


def test_generate_reports_warnings_in_metadata(client, base_payload):
    base_payload["companyConstraints"]["minEmployeesPerSlot"] = 3
    body = client.post("/schedules/auto-generate", json=base_payload).json()
    codes = {w["code"] for w in body["metadata"]["warnings"]}
    assert codes == {"under_coverage"}


def test_generate_invalid_payload(client, base_payload):
    base_payload["year"] = 1999
    base_payload["employees"][0]["contractHoursPerWeek"] = 0
    response = client.post("/schedules/auto-generate", json=base_payload)
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Invalid planning generation parameters"
    fields = {issue["field"] for issue in body["issues"]}
    assert fields == {"year", "employees.0.contractHoursPerWeek"}
    assert all(set(issue) == {"field", "message", "code"} for issue in body["issues"])


def test_generate_unreadable_body(client):
    response = client.post(
        "/schedules/auto-generate",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_generate_empty_body(client):
    response = client.post("/schedules/auto-generate")
    assert response.status_code == 400
    assert response.json()["issues"][0]["field"] == "body"


def _failing_build(*args, **kwargs) -> GenerationResult:
    raise PlanningIntegrityError(["Employee 1 monday: overlapping slots"])


def test_integrity_failure_hides_details_without_debug(client, base_payload, monkeypatch):
    monkeypatch.setattr("shiftplanner.api.app.build_week_planning", _failing_build)
    response = client.post("/schedules/auto-generate", json=base_payload)
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Planning generation failed"}


def test_integrity_failure_shows_error_in_debug(base_payload, monkeypatch):
    monkeypatch.setattr("shiftplanner.api.app.build_week_planning", _failing_build)
    client = TestClient(create_app(PlannerConfig(debug=True)))
    body = client.post("/schedules/auto-generate", json=base_payload).json()
    assert "overlapping slots" in body["error"]


def test_unexpected_error_is_500(base_payload, monkeypatch):
    def _boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr("shiftplanner.api.app.build_week_planning", _boom)
    client = TestClient(create_app(PlannerConfig(debug=True)), raise_server_exceptions=False)
    response = client.post("/schedules/auto-generate", json=base_payload)
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error", "error": "boom"}


def test_config_from_environment(tmp_path, monkeypatch, base_payload):
    path = tmp_path / "planner.yaml"
    path.write_text("validation:\n  max_contract_hours: 30\n", encoding="utf-8")
    monkeypatch.setenv("SHIFTPLANNER_CONFIG", str(path))
    client = TestClient(create_app())
    response = client.post("/schedules/auto-generate", json=base_payload)
    assert response.status_code == 400
    assert response.json()["issues"][0]["code"] == "contract_hours_too_high"
