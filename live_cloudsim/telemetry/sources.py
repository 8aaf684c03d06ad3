"""Snapshot sources: the metrics file written by the app, and a synthetic fallback."""

from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Union

import numpy as np
from loguru import logger

from ..exceptions import TelemetryMalformed, TelemetryUnavailable
from .snapshot import DEFAULT_PROJECT_NAME, Snapshot

DEFAULT_METRICS_FILE = "cloudsim-metrics.json"
DEFAULT_FALLBACK_DIRS = ("..", "../..", "./Cloud_project")


class SnapshotSource(Protocol):
    """Pull primitive for the latest telemetry reading."""

    def fetch_latest(self) -> Optional[Snapshot]:
        """Return the newest snapshot, or None when no data is available."""
        ...


class FileSnapshotSource:
    """Reads the JSON metrics file exported by the monitored application.

    The primary path is tried first, then the same relative path under each
    fallback directory.
    """

    def __init__(
        self,
        metrics_path: Union[str, Path] = DEFAULT_METRICS_FILE,
        fallback_dirs: Sequence[Union[str, Path]] = DEFAULT_FALLBACK_DIRS,
    ):
        self.metrics_path = Path(metrics_path)
        self.fallback_dirs = [Path(d) for d in fallback_dirs]
        self.last_path: Optional[Path] = None

    def candidate_paths(self) -> List[Path]:
        """Lookup order: primary path, then each fallback location."""
        candidates = [self.metrics_path]
        if not self.metrics_path.is_absolute():
            candidates.extend(d / self.metrics_path for d in self.fallback_dirs)
        return candidates

    def fetch_latest(self) -> Optional[Snapshot]:
        """Read and decode the first metrics file found.

        Raises:
            TelemetryUnavailable: If a metrics file exists but cannot be read
            TelemetryMalformed: If the file is not UTF-8 text holding a JSON object
        """
        for path in self.candidate_paths():
            if not path.is_file():
                continue

            try:
                text = path.read_text(encoding="utf-8")
            except UnicodeDecodeError as e:
                raise TelemetryMalformed(f"Metrics file {path} is not valid UTF-8: {e}") from e
            except OSError as e:
                raise TelemetryUnavailable(
                    f"Could not read metrics file {path}: {e}", path=str(path)
                ) from e

            if path != self.last_path:
                logger.info(f"Found metrics at: {path}")
            self.last_path = path
            return Snapshot.from_json(text)

        logger.debug(f"No metrics file found for {self.metrics_path}")
        return None


class SyntheticSnapshotGenerator:
    """Generates plausible snapshots when no real telemetry is available."""

    def __init__(self, random_seed: Optional[int] = 42, project_name: str = DEFAULT_PROJECT_NAME):
        self.random_seed = random_seed
        self.project_name = project_name
        self.rng = np.random.default_rng(random_seed)
        logger.info(f"SyntheticSnapshotGenerator initialized with seed {random_seed}")

    def generate(self) -> Snapshot:
        """Draw one snapshot, uniform within the documented bands."""
        uniform = self.rng.uniform
        request_count = uniform(0.0, 200.0)
        error_count = uniform(0.0, 10.0)

        return Snapshot(
            response_time_ms=uniform(80.0, 200.0),
            cpu_usage_pct=uniform(25.0, 60.0),
            memory_usage_mb=uniform(40.0, 80.0),
            request_count=request_count,
            error_count=error_count,
            success_count=max(0.0, request_count - error_count),
            active_connections=uniform(0.0, 20.0),
            project_name=self.project_name,
            page_views={
                "home": uniform(0.0, 50.0),
                "api": uniform(0.0, 100.0),
                "other": uniform(0.0, 30.0),
            },
            synthetic=True,
        )
