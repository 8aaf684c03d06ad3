"""Utility modules for the simulator."""

from .config import Config, TelemetryConfig, load_config, save_results
from .visualization import create_plots

__all__ = [
    "Config",
    "TelemetryConfig",
    "load_config",
    "save_results",
    "create_plots",
]
