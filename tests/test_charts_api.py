import json

from fastapi.testclient import TestClient

from natal_engine.app import app

client = TestClient(app)

PAYLOAD = {
    "date": "1977-05-17",
    "time": "11:29",
    "place": {"lat": 49.2827, "lon": -123.113952, "query": "Vancouver, BC"},
}


def test_compute_chart():
    res = client.post("/v1/charts/compute", json=PAYLOAD)
    assert res.status_code == 200, res.text
    data = res.json()
    assert data["chart_id"].startswith("cht_")
    assert data["meta"]["zodiac"] == "tropical"
    assert data["meta"]["house_system"] == "Placidus"
    assert data["meta"]["offset_source"] == "longitude"
    assert len(data["houses"]) == 12
    names = [b["name"] for b in data["bodies"]]
    assert "Sun" in names and "South Node" in names and "Midheaven" in names
    sun = next(b for b in data["bodies"] if b["name"] == "Sun")
    assert sun["sign"] == "Taurus"
    assert abs(data["angles"]["mc"] - 31.633) < 1e-3


def test_compute_chart_is_repeatable():
    first = client.post("/v1/charts/compute", json=PAYLOAD).json()
    second = client.post("/v1/charts/compute", json=PAYLOAD).json()
    assert first == second


def test_compute_chart_whole_sign_with_zone():
    payload = {
        **PAYLOAD,
        "house_system": "Whole Sign",
        "model": "secular",
        "place": {**PAYLOAD["place"], "tz": "America/Vancouver"},
    }
    data = client.post("/v1/charts/compute", json=payload).json()
    assert data["meta"]["house_system"] == "WholeSign"
    assert data["meta"]["model"] == "secular"
    assert data["meta"]["offset_source"] == "tz"
    assert data["houses"][1]["cusp_lon"] % 30 == 0


def test_invalid_date_returns_typed_error():
    res = client.post("/v1/charts/compute", json={**PAYLOAD, "date": "2021-02-30"})
    assert res.status_code == 422
    body = res.json()
    assert body["error"] == "InvalidDateError"
    assert body["value"] == "2021-02-30"


def test_invalid_latitude_returns_typed_error():
    payload = {**PAYLOAD, "place": {"lat": 95, "lon": 0}}
    res = client.post("/v1/charts/compute", json=payload)
    assert res.status_code == 422
    assert res.json()["error"] == "InvalidCoordinateError"


def test_unsupported_body_returns_typed_error():
    res = client.post("/v1/charts/compute", json={**PAYLOAD, "bodies": ["Sun", "Chiron"]})
    assert res.status_code == 422
    assert res.json()["error"] == "UnsupportedBodyError"


def test_unknown_house_system_rejected_by_schema():
    res = client.post("/v1/charts/compute", json={**PAYLOAD, "house_system": "Topocentric"})
    assert res.status_code == 422


def test_zodiac_lookup():
    res = client.get("/v1/charts/zodiac", params={"lon": 405.5})
    assert res.status_code == 200
    data = res.json()
    assert data["sign"] == "Taurus"
    assert abs(data["degree"] - 15.5) < 1e-9
    assert data["formatted"] == "Taurus 15°30′00″"


def test_health():
    assert client.get("/__health").json() == {"ok": True}


def test_access_log_when_enabled(monkeypatch, caplog):
    monkeypatch.setenv("LOGGING_ENABLED", "true")
    with caplog.at_level("INFO", logger="natal_engine.access"):
        client.get("/__health")
    entries = [json.loads(r.getMessage()) for r in caplog.records if r.name == "natal_engine.access"]
    assert entries and entries[-1]["endpoint"] == "/__health"
    assert entries[-1]["status"] == 200


def test_zone_directory_returns_typed_error():
    payload = {**PAYLOAD, "place": {**PAYLOAD["place"], "tz": "America"}}
    res = client.post("/v1/charts/compute", json=payload)
    assert res.status_code == 422
    assert res.json()["error"] == "InvalidTimezoneError"
