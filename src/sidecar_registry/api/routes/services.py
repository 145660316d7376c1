"""Service listing, port resolution and refresh endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query, Request

from sidecar_registry.registry.registry import ServiceRegistry
from sidecar_registry.runtime.discovery import RuntimeDiscoveryError
from sidecar_registry.service.models import PORT_NOT_FOUND

logger = logging.getLogger(__name__)

router = APIRouter(tags=["services"])


def _registry(request: Request) -> ServiceRegistry:
    return request.app.state.registry


@router.get("/services")
async def list_services(
    request: Request,
    name: Optional[str] = Query(None, description="Only services with this container name"),
) -> List[Dict[str, Any]]:
    registry = _registry(request)
    found = registry.by_name(name) if name else registry.services()
    return [s.to_dict() for s in found]


@router.get("/services/{service_id}")
async def get_service(service_id: str, request: Request) -> Dict[str, Any]:
    service = _registry(request).get(service_id)
    if service is None:
        raise HTTPException(status_code=404, detail=f"Unknown service: {service_id}")
    return service.to_dict()


@router.delete("/services/{service_id}")
async def remove_service(service_id: str, request: Request) -> Dict[str, Any]:
    """Drop a record; the response is its tombstone."""
    service = _registry(request).remove(service_id)
    if service is None:
        raise HTTPException(status_code=404, detail=f"Unknown service: {service_id}")
    logger.info("Removed service %s (%s)", service.id, service.name)
    return service.tombstoned().to_dict()


@router.get("/services/{service_id}/ports/{service_port}")
async def resolve_port(
    service_id: str,
    service_port: int,
    request: Request,
    port_type: str = Query("tcp", alias="type", description="Transport type, e.g. tcp or udp"),
) -> Dict[str, Any]:
    registry = _registry(request)
    if registry.get(service_id) is None:
        raise HTTPException(status_code=404, detail=f"Unknown service: {service_id}")
    port = registry.port_for(service_id, service_port, port_type)
    body = {
        "service_id": service_id,
        "service_port": service_port,
        "type": port_type,
        "port": PORT_NOT_FOUND if port is None else port,
    }
    if port is None:
        raise HTTPException(status_code=404, detail=body)
    return body


@router.post("/refresh")
def refresh(request: Request) -> Dict[str, Any]:
    """Rebuild records from the container runtime and evict stale ones."""
    config = request.app.state.config
    registry = _registry(request)
    try:
        updated = request.app.state.discovery.refresh(registry)
    except RuntimeDiscoveryError as exc:
        logger.warning("Refresh failed: %s", exc)
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    expired = registry.expire_stale(config.registry.stale_after) if config.registry.sweep else []
    return {
        "updated": len(updated),
        "expired": [s.id for s in expired],
    }
