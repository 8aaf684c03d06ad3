"""End-to-end run: telemetry -> scaling -> resources/workload -> simulation -> reports."""

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from loguru import logger

from .core.resources import ResourceModel, ResourceModelBuilder
from .core.scaling import ScaleFactors, ScalingPolicy
from .core.simulator import SimulationEngine
from .core.workload import CompletedTask, Workload, WorkloadGenerator
from .evaluation.metrics import ResultsAnalyzer, SimulationAnalysis
from .telemetry.poller import MetricsPoller
from .telemetry.snapshot import Snapshot
from .telemetry.sources import FileSnapshotSource, SnapshotSource, SyntheticSnapshotGenerator
from .utils.config import Config


@dataclass
class RunResult:
    """Everything produced by one simulation run."""
    telemetry_enabled: bool
    snapshot: Snapshot
    factors: ScaleFactors
    resources: ResourceModel
    workload: Workload
    completed: List[CompletedTask]
    analysis: SimulationAnalysis
    simulated_time: float
    host_utilization: Dict[str, Dict[str, float]] = field(default_factory=dict)


class LiveSimulation:
    """One telemetry-parameterized simulation run.

    In telemetry mode a MetricsPoller is started, the run waits for the
    settle delay, takes the latest snapshot once, and stops the poller when
    the engine finishes. Otherwise a single synthetic snapshot is used and
    the scale factors stay at 1.0.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        source: Optional[SnapshotSource] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or Config()
        telemetry = self.config.telemetry

        self.source = source or FileSnapshotSource(telemetry.metrics_path, telemetry.fallback_dirs)
        self.synthetic = SyntheticSnapshotGenerator(telemetry.random_seed)
        self.policy = ScalingPolicy()
        self.resource_builder = ResourceModelBuilder()
        self.workload_generator = WorkloadGenerator()
        self.engine = SimulationEngine(self.config.simulation)
        self.analyzer = ResultsAnalyzer(self.config.simulation.cost_per_second)

        self.poller: Optional[MetricsPoller] = None
        self._sleep = sleep

    @property
    def telemetry_enabled(self) -> bool:
        return self.config.telemetry.enabled

    def acquire_snapshot(self) -> Snapshot:
        """Snapshot that parameterizes this run; read once."""
        if not self.telemetry_enabled:
            logger.info("Running simulation in standalone mode")
            return self.synthetic.generate()

        telemetry = self.config.telemetry
        self.poller = MetricsPoller(self.source, self.synthetic, telemetry.poll_interval)
        self.poller.start()

        # Wait for initial data collection
        self._sleep(telemetry.settle_delay)

        snapshot = self.poller.latest()
        while snapshot is None and self.poller.is_running:
            snapshot = self.poller.wait_for_snapshot(telemetry.poll_interval)
        if snapshot is None:
            snapshot = self.poller.latest()
        if snapshot is None:
            logger.warning("Metrics poller stopped before publishing - using simulated metrics")
            snapshot = self.synthetic.generate()
        return snapshot

    def run(self) -> RunResult:
        try:
            snapshot = self.acquire_snapshot()
            factors = self.policy.factors_for(snapshot)
            resources = self.resource_builder.build(factors)
            workload = self.workload_generator.build(factors)
            completed = self.engine.run(resources.hosts, resources.vms, workload.tasks)
            host_utilization = self.engine.host_utilization()
        finally:
            self.stop()

        analysis = self.analyzer.analyze(completed, snapshot)

        return RunResult(
            telemetry_enabled=self.telemetry_enabled,
            snapshot=snapshot,
            factors=factors,
            resources=resources,
            workload=workload,
            completed=completed,
            analysis=analysis,
            simulated_time=self.engine.clock,
            host_utilization=host_utilization,
        )

    def stop(self) -> None:
        if self.poller is not None:
            self.poller.stop()
            self.poller = None
