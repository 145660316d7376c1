"""Build service records from container runtime descriptors."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from sidecar_registry.service.clock import Clock, HostnameProvider, local_hostname, utc_now
from sidecar_registry.service.labels import ServiceLabels
from sidecar_registry.service.models import Port, Service, ServiceStatus

logger = logging.getLogger(__name__)

ID_LENGTH = 12
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class ContainerPort(BaseModel):
    """A port as reported by the container runtime."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    private_port: int = Field(alias="PrivatePort")
    public_port: int = Field(default=0, alias="PublicPort")
    type: str = Field(default="tcp", alias="Type")
    ip: str = Field(default="", alias="IP")


class ContainerDescriptor(BaseModel):
    """Snapshot of a running container, as listed by the Docker Engine API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="Id")
    image: str = Field(default="", alias="Image")
    created: int = Field(default=0, alias="Created")
    names: list[str] = Field(default_factory=list, alias="Names")
    ports: list[ContainerPort] = Field(default_factory=list, alias="Ports")
    labels: dict[str, str] = Field(default_factory=dict, alias="Labels")

    @field_validator("names", "ports", "labels", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return {} if info.field_name == "labels" else []
        return value


def _created_at(epoch_seconds: int) -> datetime:
    try:
        return datetime.fromtimestamp(epoch_seconds, timezone.utc)
    except (OverflowError, OSError, ValueError):
        logger.debug("Creation time %r out of range, using the epoch", epoch_seconds)
        return _EPOCH


def build_port_for(
    port: ContainerPort,
    labels: Union[ServiceLabels, Mapping[str, str], None],
    default_ip: str,
) -> Port:
    """Map one runtime port onto a registry ``Port``.

    The logical service port comes from the ``ServicePort_<private port>``
    label and is 0 when the label is missing or not a number.
    """
    if not isinstance(labels, ServiceLabels):
        labels = ServiceLabels.from_labels(labels)
    return Port(
        type=port.type,
        port=port.public_port,
        service_port=labels.service_port_for(port.private_port),
        ip=port.ip or default_ip,
    )


class ServiceBuilder:
    """Converts container descriptors into ``Service`` records.

    The clock and hostname are injected so builds are reproducible in tests.
    """

    def __init__(
        self,
        clock: Clock = utc_now,
        hostname: HostnameProvider = local_hostname,
    ) -> None:
        self._clock = clock
        self._hostname = hostname

    def to_service(
        self,
        container: Union[ContainerDescriptor, Mapping[str, Any]],
        default_ip: str,
    ) -> Service:
        if not isinstance(container, ContainerDescriptor):
            container = ContainerDescriptor.model_validate(container)

        labels = ServiceLabels.from_labels(container.labels)
        if len(container.id) < ID_LENGTH:
            logger.debug("Container id %r shorter than %d chars, using as-is", container.id, ID_LENGTH)

        return Service(
            id=container.id[:ID_LENGTH],
            name=container.names[0] if container.names else "",
            image=container.image,
            created=_created_at(container.created),
            hostname=self._hostname(),
            ports=[build_port_for(p, labels, default_ip) for p in container.ports],
            proxy_mode=labels.proxy_mode,
            health_check=labels.health_check,
            health_check_args=labels.health_check_args,
            status=ServiceStatus.UNKNOWN,
            updated=self._clock(),
        )


def to_service(
    container: Union[ContainerDescriptor, Mapping[str, Any]],
    default_ip: str,
    *,
    clock: Optional[Clock] = None,
    hostname: Optional[HostnameProvider] = None,
) -> Service:
    """Convenience wrapper around :class:`ServiceBuilder`."""
    builder = ServiceBuilder(clock=clock or utc_now, hostname=hostname or local_hostname)
    return builder.to_service(container, default_ip)
