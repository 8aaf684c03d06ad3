"""Configuration management utilities."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from ..core.simulator import SimulationConfig
from ..telemetry.sources import DEFAULT_FALLBACK_DIRS, DEFAULT_METRICS_FILE


@dataclass
class TelemetryConfig:
    """Where telemetry comes from and how often it is polled."""
    enabled: bool = False
    metrics_path: str = DEFAULT_METRICS_FILE
    fallback_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_FALLBACK_DIRS))
    poll_interval: float = 5.0  # seconds
    settle_delay: float = 3.0  # wait for the first poll before building the run
    random_seed: Optional[int] = 42  # synthetic snapshots


class Config(BaseModel):
    """Main configuration class."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    with open(config_path, 'r') as f:
        if config_path.suffix.lower() in ['.yaml', '.yml']:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Failed to parse YAML config file: {e}")
        elif config_path.suffix.lower() == '.json':
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")
    return data


def validate_config(config: Config) -> Config:
    """Check value ranges.

    Raises:
        ValueError: If a value is out of range
    """
    telemetry = config.telemetry
    if not isinstance(telemetry.poll_interval, (int, float)) or telemetry.poll_interval <= 0:
        raise ValueError("telemetry.poll_interval must be a positive number")
    if not isinstance(telemetry.settle_delay, (int, float)) or telemetry.settle_delay < 0:
        raise ValueError("telemetry.settle_delay must be a non-negative number")
    if not isinstance(telemetry.metrics_path, str) or not telemetry.metrics_path:
        raise ValueError("telemetry.metrics_path must be a non-empty string")

    simulation = config.simulation
    if not isinstance(simulation.cost_per_second, (int, float)) or simulation.cost_per_second < 0:
        raise ValueError("simulation.cost_per_second must be a non-negative number")
    if simulation.placement_policy not in ("first_fit", "worst_fit"):
        raise ValueError("simulation.placement_policy must be 'first_fit' or 'worst_fit'")
    if simulation.max_time is not None and simulation.max_time <= 0:
        raise ValueError("simulation.max_time must be a positive number")

    return config


def load_config(config_path: Path) -> Config:
    """Load configuration from a YAML or JSON file.

    Missing sections and keys take their defaults.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the file cannot be parsed or a value is invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")
    config_data = _read_config_file(config_path)

    telemetry_data = config_data.get('telemetry') or {}
    simulation_data = config_data.get('simulation') or {}

    try:
        telemetry = TelemetryConfig(**telemetry_data)
        simulation = SimulationConfig(**simulation_data)
    except TypeError as e:
        raise ValueError(f"Invalid configuration key: {e}")

    config = validate_config(Config(telemetry=telemetry, simulation=simulation))

    logger.info(f"Configuration loaded: telemetry {'enabled' if telemetry.enabled else 'disabled'}, "
                f"metrics path {telemetry.metrics_path}")
    return config


def save_results(analysis: Dict[str, Any], output_dir: Path) -> Path:
    """Save simulation results to a JSON file."""

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    results_file = output_dir / "simulation_results.json"
    with open(results_file, 'w') as f:
        json.dump(analysis, f, indent=2, default=str)

    logger.info(f"Results saved to {results_file}")
    return results_file
