"""Service records and the builders that produce them."""

from sidecar_registry.service.builder import (
    ContainerDescriptor,
    ContainerPort,
    ServiceBuilder,
    build_port_for,
    to_service,
)
from sidecar_registry.service.labels import ServiceLabels
from sidecar_registry.service.models import PORT_NOT_FOUND, Port, Service, ServiceStatus

__all__ = [
    "ContainerDescriptor",
    "ContainerPort",
    "PORT_NOT_FOUND",
    "Port",
    "Service",
    "ServiceBuilder",
    "ServiceLabels",
    "ServiceStatus",
    "build_port_for",
    "to_service",
]
