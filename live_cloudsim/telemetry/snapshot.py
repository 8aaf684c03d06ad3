"""Telemetry snapshot value type and its JSON wire format."""

import json
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping

from loguru import logger

from ..exceptions import TelemetryMalformed

DEFAULT_PROJECT_NAME = "Unknown-NextJS-App"
PAGE_CATEGORIES = ("home", "api", "other")

# Wire key -> Snapshot attribute
_NUMERIC_FIELDS: Dict[str, str] = {
    "responseTime": "response_time_ms",
    "cpuUsage": "cpu_usage_pct",
    "memoryUsage": "memory_usage_mb",
    "requestCount": "request_count",
    "errorCount": "error_count",
    "successCount": "success_count",
    "activeConnections": "active_connections",
}


def _to_float(value: Any, key: str) -> float:
    """Decode one numeric field, falling back to 0.0 on bad input."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Malformed telemetry field '{key}': {value!r}, using 0.0")
        return 0.0
    if math.isnan(number) or math.isinf(number):
        logger.warning(f"Non-finite telemetry field '{key}': {value!r}, using 0.0")
        return 0.0
    return number


@dataclass(frozen=True)
class Snapshot:
    """One immutable telemetry reading of the monitored application."""

    response_time_ms: float = 0.0
    cpu_usage_pct: float = 0.0
    memory_usage_mb: float = 0.0
    request_count: float = 0.0
    error_count: float = 0.0
    success_count: float = 0.0
    active_connections: float = 0.0
    project_name: str = DEFAULT_PROJECT_NAME
    page_views: Mapping[str, float] = field(default_factory=dict, hash=False)
    synthetic: bool = False

    def __post_init__(self) -> None:
        # Freeze the page mapping so the whole value is read-only
        object.__setattr__(self, "page_views", MappingProxyType(dict(self.page_views)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Snapshot":
        """Build a snapshot from a decoded wire document.

        Missing, null or unparseable numeric fields default to 0.0 instead
        of failing the whole document.
        """
        values: Dict[str, Any] = {}
        for key, attr in _NUMERIC_FIELDS.items():
            raw = data.get(key)
            values[attr] = 0.0 if raw is None else _to_float(raw, key)

        project_name = data.get("projectName")
        if isinstance(project_name, str) and project_name:
            values["project_name"] = project_name

        pages = data.get("pages")
        if isinstance(pages, Mapping):
            values["page_views"] = {
                category: _to_float(pages[category], f"pages.{category}")
                for category in PAGE_CATEGORIES
                if pages.get(category) is not None
            }
        elif pages is not None:
            logger.warning(f"Ignoring malformed 'pages' field: {pages!r}")

        return cls(**values)

    @classmethod
    def from_json(cls, text: str) -> "Snapshot":
        """Decode a JSON snapshot document.

        Raises:
            TelemetryMalformed: If the text is not a JSON object
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise TelemetryMalformed(f"Invalid snapshot JSON: {e}") from e

        if not isinstance(data, dict):
            raise TelemetryMalformed(
                f"Snapshot must be a JSON object, got {type(data).__name__}"
            )
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Encode in the wire format."""
        data: Dict[str, Any] = {"projectName": self.project_name}
        for key, attr in _NUMERIC_FIELDS.items():
            data[key] = getattr(self, attr)
        data["pages"] = dict(self.page_views)
        return data
