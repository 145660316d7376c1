"""Pydantic models for sidecar configuration."""

from __future__ import annotations

import logging
from datetime import timedelta

from pydantic import BaseModel, Field, field_validator


class SidecarIdentity(BaseModel):
    """Top-level identity metadata."""

    name: str = "Sidecar"
    version: str = "0.1.0"


class DiscoveryConfig(BaseModel):
    """How containers are discovered and addressed."""

    default_ip: str = "127.0.0.1"
    docker_url: str = ""  # empty = DOCKER_HOST / local socket
    hostname: str = ""  # empty = this machine's hostname


class RegistryConfig(BaseModel):
    """Record lifetime settings."""

    stale_after_seconds: int = Field(default=300, gt=0)
    sweep: bool = True

    @property
    def stale_after(self) -> timedelta:
        return timedelta(seconds=self.stale_after_seconds)


class SidecarConfig(BaseModel):
    """Root configuration model for .sidecar.yaml."""

    sidecar: SidecarIdentity = Field(default_factory=SidecarIdentity)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level '{value}'")
        return level
