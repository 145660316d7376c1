"""In-memory registry of service records."""

from sidecar_registry.registry.registry import ServiceRegistry

__all__ = ["ServiceRegistry"]
