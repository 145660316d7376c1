"""One-shot container discovery against the Docker Engine API."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import docker
from docker.errors import DockerException
from pydantic import ValidationError

from sidecar_registry.config.models import SidecarConfig
from sidecar_registry.registry.registry import ServiceRegistry
from sidecar_registry.service.builder import ContainerDescriptor, ServiceBuilder
from sidecar_registry.service.clock import local_hostname
from sidecar_registry.service.models import Service

logger = logging.getLogger(__name__)


class RuntimeDiscoveryError(RuntimeError):
    """The container runtime could not be queried."""


def _client(base_url: str = "") -> docker.DockerClient:
    if base_url:
        return docker.DockerClient(base_url=base_url)
    return docker.from_env()


class DockerDiscovery:
    """Lists running containers and turns them into service records."""

    def __init__(
        self,
        client: Optional[docker.DockerClient] = None,
        *,
        base_url: str = "",
        builder: Optional[ServiceBuilder] = None,
        default_ip: str = "127.0.0.1",
    ) -> None:
        self._client = client
        self._base_url = base_url
        self._builder = builder or ServiceBuilder()
        self.default_ip = default_ip

    @classmethod
    def from_config(cls, config: SidecarConfig) -> DockerDiscovery:
        fixed_hostname = config.discovery.hostname
        builder = ServiceBuilder(hostname=(lambda: fixed_hostname) if fixed_hostname else local_hostname)
        return cls(
            base_url=config.discovery.docker_url,
            builder=builder,
            default_ip=config.discovery.default_ip,
        )

    @property
    def client(self) -> docker.DockerClient:
        if self._client is None:
            try:
                self._client = _client(self._base_url)
            except DockerException as exc:
                raise RuntimeDiscoveryError(f"Docker is not available: {exc}") from exc
        return self._client

    def list_descriptors(self) -> List[ContainerDescriptor]:
        try:
            raw: List[dict[str, Any]] = self.client.api.containers()
        except DockerException as exc:
            raise RuntimeDiscoveryError(f"Listing containers failed: {exc}") from exc

        descriptors: List[ContainerDescriptor] = []
        for entry in raw:
            try:
                descriptors.append(ContainerDescriptor.model_validate(entry))
            except ValidationError:
                logger.exception("Skipping malformed container entry %r", entry.get("Id"))
        return descriptors

    def discover(self) -> List[Service]:
        services: List[Service] = []
        for descriptor in self.list_descriptors():
            try:
                services.append(self._builder.to_service(descriptor, self.default_ip))
            except Exception:
                logger.exception("Skipping container %s: conversion failed", descriptor.id)
        return services

    def refresh(self, registry: ServiceRegistry) -> List[Service]:
        """Rebuild every running container's record and store it in *registry*."""
        services = self.discover()
        for service in services:
            registry.upsert(service)
        logger.debug("Refreshed %d services from docker", len(services))
        return services
