"""FastAPI application factory for the sidecar registry."""

from __future__ import annotations

import yaml
from fastapi import FastAPI

from sidecar_registry.api.routes import services
from sidecar_registry.config.loader import load_config_or_default
from sidecar_registry.config.models import SidecarConfig
from sidecar_registry.registry.registry import ServiceRegistry
from sidecar_registry.runtime.discovery import DockerDiscovery


def create_app(
    config: SidecarConfig | None = None,
    registry: ServiceRegistry | None = None,
    discovery: DockerDiscovery | None = None,
) -> FastAPI:
    if config is None:
        try:
            config = load_config_or_default()
        except (ValueError, yaml.YAMLError):
            config = SidecarConfig()

    app = FastAPI(title=config.sidecar.name, version=config.sidecar.version, description="Container service registry")

    app.state.config = config
    app.state.registry = registry if registry is not None else ServiceRegistry()
    # Docker is only contacted on the first refresh
    app.state.discovery = discovery if discovery is not None else DockerDiscovery.from_config(config)

    @app.get("/health", tags=["meta"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(services.router, prefix="/api")
    return app
