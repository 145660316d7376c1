"""Sidecar configuration system."""

from sidecar_registry.config.loader import find_config_file, load_config, load_config_or_default
from sidecar_registry.config.models import DiscoveryConfig, RegistryConfig, SidecarConfig, SidecarIdentity

__all__ = [
    "DiscoveryConfig",
    "RegistryConfig",
    "SidecarConfig",
    "SidecarIdentity",
    "load_config",
    "find_config_file",
    "load_config_or_default",
]
