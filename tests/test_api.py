"""Tests for FastAPI endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from sidecar_registry.api.app import create_app
from sidecar_registry.config.models import SidecarConfig
from sidecar_registry.registry.registry import ServiceRegistry
from sidecar_registry.runtime.discovery import RuntimeDiscoveryError
from sidecar_registry.service.models import Port, Service

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def _svc(service_id: str = "88862023487f", age: timedelta = timedelta(0)) -> Service:
    return Service(
        id=service_id,
        name="/sample-app",
        image="example.com/app:latest",
        ports=[
            Port("tcp", 8173, 8080, "127.0.0.1"),
            Port("udp", 8172, 8080, "127.0.0.1"),
        ],
        updated=NOW - age,
    )


@pytest.fixture()
def registry() -> ServiceRegistry:
    reg = ServiceRegistry(clock=lambda: NOW)
    reg.upsert(_svc())
    return reg


@pytest.fixture()
def discovery() -> MagicMock:
    return MagicMock()


@pytest.fixture()
def client(sample_config: SidecarConfig, registry: ServiceRegistry, discovery: MagicMock) -> TestClient:
    return TestClient(create_app(config=sample_config, registry=registry, discovery=discovery))


# ─── Health endpoint ───


class TestHealthEndpoint:
    def test_health(self, client: TestClient):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


# ─── Services endpoints ───


class TestServicesEndpoints:
    def test_list_services(self, client: TestClient):
        resp = client.get("/api/services")
        assert resp.status_code == 200
        data = resp.json()
        assert len(data) == 1
        assert data[0]["ID"] == "88862023487f"
        assert data[0]["Ports"][1]["Type"] == "udp"

    def test_filter_by_name(self, client: TestClient, registry: ServiceRegistry):
        registry.upsert(Service(id="otherservice", name="/other", updated=NOW))
        resp = client.get("/api/services", params={"name": "sample-app"})
        assert resp.status_code == 200
        assert [s["ID"] for s in resp.json()] == ["88862023487f"]

    def test_filter_by_unknown_name(self, client: TestClient):
        resp = client.get("/api/services", params={"name": "/nobody"})
        assert resp.json() == []

    def test_get_service(self, client: TestClient):
        resp = client.get("/api/services/88862023487f")
        assert resp.status_code == 200
        assert resp.json()["Name"] == "/sample-app"

    def test_get_unknown_service(self, client: TestClient):
        resp = client.get("/api/services/missing")
        assert resp.status_code == 404


class TestResolvePort:
    def test_tcp(self, client: TestClient):
        resp = client.get("/api/services/88862023487f/ports/8080")
        assert resp.status_code == 200
        assert resp.json() == {"service_id": "88862023487f", "service_port": 8080, "type": "tcp", "port": 8173}

    def test_udp(self, client: TestClient):
        resp = client.get("/api/services/88862023487f/ports/8080", params={"type": "udp"})
        assert resp.json()["port"] == 8172

    def test_unmapped_port(self, client: TestClient):
        resp = client.get("/api/services/88862023487f/ports/8090")
        assert resp.status_code == 404
        assert resp.json()["detail"]["port"] == -1

    def test_unknown_service(self, client: TestClient):
        resp = client.get("/api/services/missing/ports/8080")
        assert resp.status_code == 404


class TestRefresh:
    def test_refresh_updates_and_sweeps(self, client: TestClient, registry: ServiceRegistry, discovery: MagicMock):
        registry.upsert(_svc("oldservice01", age=timedelta(minutes=10)))
        discovery.refresh.return_value = [_svc()]

        resp = client.post("/api/refresh")

        assert resp.status_code == 200
        assert resp.json() == {"updated": 1, "expired": ["oldservice01"]}
        discovery.refresh.assert_called_once_with(registry)
        assert registry.get("oldservice01") is None

    def test_refresh_without_sweep(self, sample_config: SidecarConfig, registry: ServiceRegistry, discovery: MagicMock):
        sample_config.registry.sweep = False
        registry.upsert(_svc("oldservice01", age=timedelta(minutes=10)))
        discovery.refresh.return_value = []
        client = TestClient(create_app(config=sample_config, registry=registry, discovery=discovery))

        resp = client.post("/api/refresh")

        assert resp.json() == {"updated": 0, "expired": []}
        assert registry.get("oldservice01") is not None

    def test_refresh_runtime_unavailable(self, client: TestClient, discovery: MagicMock):
        discovery.refresh.side_effect = RuntimeDiscoveryError("Docker is not available: boom")
        resp = client.post("/api/refresh")
        assert resp.status_code == 503
        assert "Docker is not available" in resp.json()["detail"]


class TestRemoveService:
    def test_remove_returns_tombstone(self, client: TestClient, registry: ServiceRegistry):
        resp = client.delete("/api/services/88862023487f")
        assert resp.status_code == 200
        data = resp.json()
        assert data["ID"] == "88862023487f"
        assert data["Status"] == 3
        assert registry.get("88862023487f") is None

    def test_remove_unknown(self, client: TestClient):
        resp = client.delete("/api/services/missing")
        assert resp.status_code == 404
