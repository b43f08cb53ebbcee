from __future__ import annotations

from fastapi.testclient import TestClient

from api.main import app

client = TestClient(app)


def _body() -> dict:
    return {
        "catalog": {"MIT": {"category": "permissive"}, "GPL-3.0": {"category": "copyleft"}},
        "policy": {"policies": {"public": {"categories": {"permissive": "Ok", "copyleft": "Violation"}}}},
        "packages": [{"id": "left-pad", "version": "1.0.0", "originProject": "WebApp", "license": "MIT"}],
    }


def test_healthz() -> None:
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert r.headers["x-request-id"]


def test_evaluate_ok() -> None:
    r = client.post("/v1/evaluate", json=_body(), headers={"x-request-id": "req-1"})
    assert r.status_code == 200
    j = r.json()
    assert j["request_id"] == "req-1"
    assert j["exit_code"] == 0
    assert j["packages"][0]["license"] == "MIT"
    assert j["packages"][0]["result"] == "Ok"


def test_evaluate_violation() -> None:
    body = _body()
    body["packages"].append({"id": "gpl-lib", "version": "1.0", "originProject": "WebApp", "license": "GPL-3.0"})
    r = client.post("/v1/evaluate", json=body)
    assert r.status_code == 200
    j = r.json()
    assert j["exit_code"] == 3
    assert j["summary"]["Violation"] == 1


def test_evaluate_rejects_bad_policy() -> None:
    body = _body()
    body["policy"] = {"policies": {"public": {"categories": {"permissive": "Maybe"}}}}
    r = client.post("/v1/evaluate", json=body)
    assert r.status_code == 422
    assert "invalid policy table" in r.json()["detail"]


def test_api_key_required_when_configured(monkeypatch) -> None:
    monkeypatch.setenv("LICENSE_INSPECTOR_API_KEY", "s3cret")
    assert client.post("/v1/evaluate", json=_body()).status_code == 401
    r = client.post("/v1/evaluate", json=_body(), headers={"x-api-key": "s3cret"})
    assert r.status_code == 200
