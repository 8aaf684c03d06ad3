"""Error taxonomy for the simulator.

Telemetry errors are always recovered by the poller (a synthetic snapshot
takes the place of the missing or broken one). Only ResourceModelError is
fatal: it means the datacenter could not be built at all.
"""

from typing import Optional


class CloudSimError(Exception):
    """Base class for simulator errors."""


class TelemetryUnavailable(CloudSimError):
    """The snapshot source is missing or unreadable."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class TelemetryMalformed(CloudSimError):
    """The snapshot document could not be decoded."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class ResourceModelError(CloudSimError):
    """The resource model could not be constructed."""
