"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path

import pytest

try:
    from fastapi.testclient import TestClient
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    pytest.skip("fastapi not installed", allow_module_level=True)

from codescope.engine import AnalysisEngine
from codescope.errors import ConfigurationError
from codescope.models import OPERATIONS, VERSION
from codescope.service import create_app
from tests._fixtures.repo_builder import RepoBuilder


class _RecordingFactory:
    def __init__(self) -> None:
        self.paths: list[str] = []

    def __call__(self, path: str) -> AnalysisEngine:
        self.paths.append(path)
        return AnalysisEngine(path)


@pytest.fixture
def factory() -> _RecordingFactory:
    return _RecordingFactory()


@pytest.fixture
def client(factory: _RecordingFactory) -> TestClient:
    return TestClient(create_app(factory))


@pytest.fixture
def project(repo_builder: RepoBuilder) -> Path:
    repo_builder.write(
        {
            "src/services/orders.py": "def place(order):\n    if order:\n        return order\n",
            "src/models/order.py": "class Order:\n    pass\n",
        }
    )
    return repo_builder.path()


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": VERSION}


def test_operations_endpoint(client: TestClient) -> None:
    response = client.get("/operations")
    assert response.status_code == 200
    assert response.json() == {"operations": list(OPERATIONS)}


def test_analyze_endpoint_returns_envelope(
    client: TestClient, factory: _RecordingFactory, project: Path
) -> None:
    response = client.post(
        "/analyze",
        json={"path": str(project), "operation": "quality", "params": {"hotspot_limit": 1}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["operation"] == "quality"
    assert body["metadata"]["filesAnalyzed"] == 2
    assert len(body["data"]["hotspots"]) == 1
    assert factory.paths == [str(project)]


def test_analyze_endpoint_honours_scope(client: TestClient, project: Path) -> None:
    response = client.post(
        "/analyze", json={"path": str(project), "operation": "architecture", "scope": "module"}
    )

    assert response.status_code == 200
    assert response.json()["metadata"]["scope"] == "module"


def test_failed_analysis_is_unprocessable(client: TestClient, project: Path) -> None:
    response = client.post("/analyze", json={"path": str(project), "operation": "security"})

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert "security" in body["error"]


def test_configuration_errors_are_bad_requests() -> None:
    def _broken(path: str) -> AnalysisEngine:
        raise ConfigurationError("scope must be one of full, module, incremental")

    response = TestClient(create_app(_broken)).post(
        "/analyze", json={"path": "/tmp/x", "operation": "quality"}
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "scope must be one of full, module, incremental"}


def test_missing_fields_are_rejected(client: TestClient) -> None:
    response = client.post("/analyze", json={"operation": "quality"})

    assert response.status_code == 422
    assert "detail" in response.json()
