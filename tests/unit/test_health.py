from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

import floorops.api.routes.health as health_route
from floorops.api.main import create_app
from floorops.infrastructure.storage import SQL_BACKEND, memory_storage
from floorops.tools.seed import seeded_memory_store


def _client(backend: str | None = None) -> TestClient:
    storage = memory_storage(seeded_memory_store())
    if backend is not None:
        storage = replace(storage, backend=backend)
    return TestClient(create_app(storage=storage))


def test_live_health_endpoint() -> None:
    response = _client().get("/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ready_with_memory_backend_needs_no_services(monkeypatch) -> None:
    def _fail(timeout_seconds=1.0):
        raise AssertionError("memory backend must not ping external services")

    monkeypatch.setattr(health_route, "ping_database", _fail)
    monkeypatch.setattr(health_route, "ping_redis", _fail)

    response = _client().get("/health/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "storage": "memory"}


def test_ready_health_endpoint_healthy_with_mocks(monkeypatch) -> None:
    monkeypatch.setattr(health_route, "ping_database", lambda timeout_seconds=1.0: True)
    monkeypatch.setattr(health_route, "ping_redis", lambda timeout_seconds=1.0: True)

    response = _client(SQL_BACKEND).get("/health/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "storage": "sql"}


def test_ready_health_endpoint_reports_failed_checks(monkeypatch) -> None:
    monkeypatch.setattr(health_route, "ping_database", lambda timeout_seconds=1.0: True)
    monkeypatch.setattr(health_route, "ping_redis", lambda timeout_seconds=1.0: False)

    response = _client(SQL_BACKEND).get("/health/ready")

    assert response.status_code == 503
    assert response.json()["checks"] == {"database": True, "redis": False}


def test_metrics_endpoint_exposes_prometheus_text() -> None:
    client = _client()
    client.get("/health/live")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "http_requests_total" in response.text


def test_request_id_is_echoed() -> None:
    response = _client().get("/health/live", headers={"X-Request-Id": "req-123"})

    assert response.headers["X-Request-Id"] == "req-123"
