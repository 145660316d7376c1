"""In-memory service registry with stale-record eviction."""

from __future__ import annotations

import logging
from datetime import timedelta
from threading import Lock
from typing import Dict, List, Optional

from sidecar_registry.service.clock import Clock, utc_now
from sidecar_registry.service.models import Service

logger = logging.getLogger(__name__)


class ServiceRegistry:
    """Services keyed by ID, replaced wholesale on every refresh."""

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._lock = Lock()
        self._services: Dict[str, Service] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._services)

    @property
    def service_ids(self) -> List[str]:
        with self._lock:
            return list(self._services.keys())

    def get(self, service_id: str) -> Optional[Service]:
        with self._lock:
            return self._services.get(service_id)

    def upsert(self, service: Service) -> bool:
        """Store *service* unless an equally new or newer snapshot is held."""
        with self._lock:
            current = self._services.get(service.id)
            if current is not None and not service.invalidates(current):
                return False
            self._services[service.id] = service
            return True

    def remove(self, service_id: str) -> Optional[Service]:
        with self._lock:
            return self._services.pop(service_id, None)

    def services(self) -> List[Service]:
        with self._lock:
            return sorted(self._services.values(), key=lambda s: (s.name, s.id))

    def by_name(self, name: str) -> List[Service]:
        """Services whose container name matches *name*, with or without the leading slash."""
        wanted = name.lstrip("/")
        if not wanted:
            return []
        return [s for s in self.services() if s.name.lstrip("/") == wanted]

    def port_for(self, service_id: str, service_port: int, port_type: str) -> Optional[int]:
        service = self.get(service_id)
        if service is None:
            return None
        return service.port_for_service_port(service_port, port_type)

    def expire_stale(self, lifespan: timedelta) -> List[Service]:
        """Evict every record not refreshed within *lifespan*."""
        with self._lock:
            stale = [s for s in self._services.values() if s.is_stale(lifespan, clock=self._clock)]
            for service in stale:
                del self._services[service.id]
        for service in stale:
            logger.info("Expired stale service %s (%s), last updated %s", service.id, service.name, service.updated)
        return stale
