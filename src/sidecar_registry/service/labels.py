"""Typed view over the free-form container labels the registry understands."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

SERVICE_PORT_PREFIX = "ServicePort_"
PROXY_MODE_LABEL = "ProxyMode"
HEALTH_CHECK_LABEL = "HealthCheck"
HEALTH_CHECK_ARGS_LABEL = "HealthCheckArgs"

# leading zeros are stripped before the digit count is capped
_DECIMAL_RE = re.compile(r"^([+-]?)0*([0-9]{1,19})$")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _parse_port(key: str, raw: object) -> int:
    """Decimal value of a label, 0 unless it is a signed 64-bit integer."""
    text = raw.strip() if isinstance(raw, str) else ""
    match = _DECIMAL_RE.match(text)
    value = int(match.group(1) + match.group(2)) if match else None
    if value is None or not _INT64_MIN <= value <= _INT64_MAX:
        logger.debug("Ignoring malformed %s label: %.40r", key, raw)
        return 0
    return value


@dataclass(frozen=True)
class ServiceLabels:
    """Registry configuration extracted from a container's labels.

    Missing or malformed values fall back to empty/zero defaults so one bad
    label never stops the container from being registered.
    """

    proxy_mode: str = ""
    health_check: str = ""
    health_check_args: str = ""
    # keyed by the raw suffix of "ServicePort_<private port>"
    service_ports: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_labels(cls, labels: Optional[Mapping[str, str]]) -> ServiceLabels:
        labels = labels or {}
        service_ports = {
            key[len(SERVICE_PORT_PREFIX):]: _parse_port(key, value)
            for key, value in labels.items()
            if key.startswith(SERVICE_PORT_PREFIX)
        }
        return cls(
            proxy_mode=labels.get(PROXY_MODE_LABEL) or "",
            health_check=labels.get(HEALTH_CHECK_LABEL) or "",
            health_check_args=labels.get(HEALTH_CHECK_ARGS_LABEL) or "",
            service_ports=service_ports,
        )

    def service_port_for(self, private_port: int) -> int:
        """Logical port declared for *private_port*, or 0 if none is declared."""
        return self.service_ports.get(str(private_port), 0)
