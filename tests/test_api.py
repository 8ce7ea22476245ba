"""
HTTP adapter tests: calculator listing, validation and calculation routes.

Tests:
1-3. Health and calculator catalog
4-6. Validate and calculate success paths
7-10. 400 / 404 / 500 mapping
"""

import pytest

from calc_engine.calculators.base import define_calculator, number_field


def _boom(inputs, library):
    raise KeyError("secret_internal_key")


@pytest.fixture
def failing_calculator(temporary_calculator):
    return temporary_calculator(define_calculator(
        id="always-fails", title="Always Fails", category="Test",
        fields=[number_field("x", 0, 10)], compute=_boom, example_inputs={"x": 1},
    ))


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["calculators"] >= 6


def test_list_calculators(client):
    resp = client.get("/api/calculators/")
    assert resp.status_code == 200
    ids = {c["id"] for c in resp.json()}
    assert "material-selection" in ids
    assert "architectural-metal" in ids
    assert "cutting-time-estimator" in ids


def test_calculator_detail(client):
    resp = client.get("/api/calculators/heat-affected-zone")
    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "Heat Affected Zone Calculator"
    field_ids = [f["id"] for f in data["fields"]]
    assert field_ids[:4] == ["material_type", "thickness", "laser_power", "cutting_speed"]
    assert data["default_inputs"]["beam_diameter"] == 0.2


def test_validate_route(client):
    resp = client.post("/api/calculators/power-speed-matching/validate",
                       json={"inputs": {"material_type": "steel"}})
    assert resp.status_code == 200
    data = resp.json()
    assert data["is_valid"] is False
    assert {e["code"] for e in data["errors"]} == {"REQUIRED"}


def test_calculate_route(client):
    example = client.get("/api/calculators/material-selection/example").json()
    resp = client.post("/api/calculators/material-selection/calculate", json={"inputs": example})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["metadata"]["calculator_id"] == "material-selection"
    assert body["data"]["recommended_materials"][0]["material"] == "Carbon Steel"


def test_defaults_route(client):
    resp = client.get("/api/calculators/architectural-metal/defaults")
    assert resp.status_code == 200
    assert resp.json()["material_thickness"] == 3.0


def test_calculate_invalid_inputs_400(client):
    resp = client.post("/api/calculators/heat-affected-zone/calculate",
                       json={"inputs": {"material_type": "steel", "thickness": 500,
                                        "laser_power": 3000, "cutting_speed": 2000}})
    assert resp.status_code == 400
    issues = resp.json()["detail"]
    assert issues[0]["field"] == "thickness"
    assert issues[0]["code"] == "ABOVE_MAXIMUM"


def test_integer_overflow_is_a_400(client):
    body = ('{"inputs": {"material_type": "steel", "thickness": 1' + "0" * 400 +
            ', "laser_power": 3000, "cutting_speed": 2000}}')
    resp = client.post("/api/calculators/heat-affected-zone/calculate", content=body,
                       headers={"content-type": "application/json"})
    assert resp.status_code == 400
    issues = resp.json()["detail"]
    assert [(i["field"], i["code"]) for i in issues] == [("thickness", "NOT_A_NUMBER")]


def test_unknown_calculator_404(client):
    assert client.get("/api/calculators/flux-capacitor").status_code == 404
    resp = client.post("/api/calculators/flux-capacitor/calculate", json={"inputs": {}})
    assert resp.status_code == 404


def test_compute_failure_500_hides_internals(client, failing_calculator):
    resp = client.post("/api/calculators/always-fails/calculate", json={"inputs": {"x": 1}})
    assert resp.status_code == 500
    body = resp.json()
    assert body["detail"] == "Calculation failed"
    assert len(body["request_id"]) == 32
    assert "secret_internal_key" not in resp.text
