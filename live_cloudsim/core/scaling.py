"""Telemetry-to-capacity scaling policy."""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from ..telemetry.snapshot import Snapshot

# Baselines of a "normal" operating point
CPU_BASELINE_PCT = 40.0
RESPONSE_BASELINE_MS = 100.0
LOAD_BASELINE_REQUESTS = 100.0
DATACENTER_CPU_BASELINE_PCT = 35.0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class ScaleFactors:
    """Multipliers applied to base capacity and workload volume."""

    cpu: float = 1.0  # per-VM cores
    response: float = 1.0  # task length and VM RAM
    load: float = 1.0  # task counts and VM RAM
    mips: float = 1.0  # per-VM MIPS rating
    datacenter: float = 1.0  # host cores

    @classmethod
    def unit(cls) -> "ScaleFactors":
        return cls()


class ScalingPolicy:
    """Maps a telemetry snapshot to clamped scale factors.

    Host and VM CPU scaling use different baselines and bounds: the
    datacenter factor sizes physical capacity, the cpu and mips factors
    size each VM role.
    """

    cpu_bounds = (0.5, 2.5)
    response_bounds = (0.4, 2.0)
    load_bounds = (0.6, 1.8)
    mips_bounds = (0.5, 2.2)
    datacenter_floor = 0.7

    def compute(self, snapshot: Snapshot) -> ScaleFactors:
        """Compute scale factors for one snapshot. Pure: no hidden state."""
        cpu_ratio = snapshot.cpu_usage_pct / CPU_BASELINE_PCT

        return ScaleFactors(
            cpu=clamp(cpu_ratio, *self.cpu_bounds),
            response=clamp(snapshot.response_time_ms / RESPONSE_BASELINE_MS, *self.response_bounds),
            load=clamp(snapshot.request_count / LOAD_BASELINE_REQUESTS, *self.load_bounds),
            mips=clamp(cpu_ratio, *self.mips_bounds),
            datacenter=max(
                self.datacenter_floor,
                snapshot.cpu_usage_pct / DATACENTER_CPU_BASELINE_PCT,
            ),
        )

    def factors_for(self, snapshot: Optional[Snapshot]) -> ScaleFactors:
        """Scale factors for a run; synthetic or missing data gives unit factors."""
        if snapshot is None or snapshot.synthetic:
            logger.info("No real telemetry - using unit scale factors")
            return ScaleFactors.unit()

        factors = self.compute(snapshot)
        logger.info(
            f"Adjusted infrastructure - CPU scale: {factors.cpu:.2f}, "
            f"Response scale: {factors.response:.2f}, "
            f"Load scale: {factors.load:.2f}"
        )
        return factors
