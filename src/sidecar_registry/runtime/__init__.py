"""Container runtime adapters."""

from sidecar_registry.runtime.discovery import DockerDiscovery, RuntimeDiscoveryError

__all__ = ["DockerDiscovery", "RuntimeDiscoveryError"]
