"""Clock and hostname providers injected into the service builder."""

from __future__ import annotations

import functools
import socket
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]
HostnameProvider = Callable[[], str]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@functools.lru_cache(maxsize=1)
def local_hostname() -> str:
    """Hostname of the machine running the registry agent."""
    return socket.gethostname()
