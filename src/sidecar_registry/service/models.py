"""Service registry records: published ports and the services that own them."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import Any, Optional

from sidecar_registry.service.clock import Clock, utc_now

# Returned at the HTTP/CLI boundary when a service port cannot be resolved.
PORT_NOT_FOUND = -1

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class ServiceStatus(IntEnum):
    """Registry lifecycle state of a service record."""

    UNKNOWN = 0
    ALIVE = 1
    UNHEALTHY = 2
    TOMBSTONE = 3
    DRAINING = 4

    @classmethod
    def label(cls, value: int) -> str:
        try:
            return cls(value).name.lower()
        except ValueError:
            return "unknown"


@dataclass
class Port:
    """One published network endpoint of a service."""

    type: str
    port: int
    service_port: int = 0
    ip: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "Type": self.type,
            "Port": self.port,
            "ServicePort": self.service_port,
            "IP": self.ip,
        }


@dataclass
class Service:
    """A registry record for one running container.

    Records are snapshots: a refresh produces a new ``Service`` rather than
    mutating the stored one.
    """

    id: str
    name: str = ""
    image: str = ""
    created: datetime = _EPOCH
    hostname: str = ""
    ports: list[Port] = field(default_factory=list)
    proxy_mode: str = ""
    health_check: str = ""
    health_check_args: str = ""
    status: int = ServiceStatus.UNKNOWN
    updated: datetime = _EPOCH

    def find_port(self, service_port: int, port_type: str) -> Optional[Port]:
        """First port mapped to *service_port* over *port_type*, if any."""
        for port in self.ports:
            if port.service_port == service_port and port.type == port_type:
                return port
        return None

    def port_for_service_port(self, service_port: int, port_type: str) -> Optional[int]:
        """Concrete port a caller should use to reach *service_port*."""
        port = self.find_port(service_port, port_type)
        if port is None:
            return None
        return port.port

    def is_stale(self, lifespan: timedelta, clock: Clock = utc_now) -> bool:
        return clock() - self.updated > lifespan

    def invalidates(self, other: Optional[Service]) -> bool:
        """True when this record is a newer snapshot than *other*."""
        return other is not None and self.updated > other.updated

    def version(self) -> str:
        """Tag portion of the image reference, or an empty string."""
        image = self.image.split("@", 1)[0]
        if ":" not in image:
            return ""
        tag = image.rsplit(":", 1)[1]
        if "/" in tag:
            return ""
        return tag

    def tombstoned(self, clock: Clock = utc_now) -> Service:
        return replace(
            self,
            ports=list(self.ports),
            status=ServiceStatus.TOMBSTONE,
            updated=clock(),
        )

    @property
    def status_label(self) -> str:
        return ServiceStatus.label(self.status)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ID": self.id,
            "Name": self.name,
            "Image": self.image,
            "Created": self.created.isoformat(),
            "Hostname": self.hostname,
            "Ports": [p.to_dict() for p in self.ports],
            "Updated": self.updated.isoformat(),
            "ProxyMode": self.proxy_mode,
            "Status": int(self.status),
            "HealthCheck": self.health_check,
            "HealthCheckArgs": self.health_check_args,
        }
