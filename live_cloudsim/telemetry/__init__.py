"""Telemetry snapshots and the metrics poller."""

from .snapshot import Snapshot
from .sources import FileSnapshotSource, SnapshotSource, SyntheticSnapshotGenerator
from .poller import MetricsPoller, SnapshotHandle

__all__ = [
    "Snapshot",
    "SnapshotSource",
    "FileSnapshotSource",
    "SyntheticSnapshotGenerator",
    "MetricsPoller",
    "SnapshotHandle",
]
