"""Shared fixtures for sidecar registry tests."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict

import pytest
import yaml

from sidecar_registry.config.models import SidecarConfig

SAMPLE_CONTAINER: Dict[str, Any] = {
    "Id": "88862023487fa0ae043c47d7b441f684fc39145d1d9fa398450e4da2e53af5e8",
    "Image": "example.com/docker/fabulous-container:latest",
    "Command": "/fabulous_app",
    "Created": 1457144774,
    "Status": "Up 34 seconds",
    "Ports": [
        {"PrivatePort": 9990, "PublicPort": 0, "Type": "tcp", "IP": ""},
        {"PrivatePort": 8080, "PublicPort": 31355, "Type": "tcp", "IP": "192.168.77.13"},
    ],
    "SizeRw": 0,
    "SizeRootFs": 0,
    "Names": ["/sample-app-go-worker-eebb5aad1a17ee"],
    "Labels": {
        "ServicePort_8080": "17010",
        "ProxyMode": "tcp",
        "HealthCheck": "HttpGet",
        "HealthCheckArgs": "http://127.0.0.1:39519/status/check",
    },
}

SAMPLE_CONFIG: Dict[str, Any] = {
    "sidecar": {"name": "Sidecar", "version": "0.1.0"},
    "discovery": {
        "default_ip": "10.0.0.5",
        "docker_url": "",
        "hostname": "beowulf",
    },
    "registry": {"stale_after_seconds": 60, "sweep": True},
    "log_level": "info",
}


@pytest.fixture()
def sample_container() -> Dict[str, Any]:
    """Docker Engine API summary of a running container."""
    return copy.deepcopy(SAMPLE_CONTAINER)


@pytest.fixture()
def sample_config() -> SidecarConfig:
    return SidecarConfig(**SAMPLE_CONFIG)


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    """Write sample config to a temp .sidecar.yaml and return the path."""
    path = tmp_path / ".sidecar.yaml"
    with path.open("w") as fh:
        yaml.dump(SAMPLE_CONFIG, fh)
    return path
