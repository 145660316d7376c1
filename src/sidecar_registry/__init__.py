"""Sidecar: container service registry records."""

__version__ = "0.1.0"
