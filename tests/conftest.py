"""Shared fixtures for the simulator tests."""

import json

import pytest

from live_cloudsim.core.scaling import ScaleFactors, ScalingPolicy
from live_cloudsim.core.workload import CompletedTask, Task, WorkloadClass
from live_cloudsim.telemetry.snapshot import Snapshot
from live_cloudsim.utils.config import Config, SimulationConfig, TelemetryConfig

SAMPLE_METRICS = {
    "projectName": "shop-frontend",
    "responseTime": 125.5,
    "cpuUsage": 45.2,
    "memoryUsage": 67.8,
    "requestCount": 1547,
    "errorCount": 12,
    "successCount": 1535,
    "activeConnections": 8,
    "pages": {"home": 420, "api": 980, "other": 147},
}


@pytest.fixture
def sample_metrics():
    return dict(SAMPLE_METRICS)


@pytest.fixture
def real_snapshot():
    return Snapshot.from_dict(SAMPLE_METRICS)


@pytest.fixture
def real_factors(real_snapshot):
    return ScalingPolicy().compute(real_snapshot)


@pytest.fixture
def unit_factors():
    return ScaleFactors.unit()


@pytest.fixture
def metrics_file(tmp_path):
    path = tmp_path / "cloudsim-metrics.json"
    path.write_text(json.dumps(SAMPLE_METRICS))
    return path


@pytest.fixture
def fast_config(tmp_path):
    """Config with no settle delay and a missing metrics file."""
    return Config(
        telemetry=TelemetryConfig(
            metrics_path=str(tmp_path / "missing.json"),
            fallback_dirs=[],
            settle_delay=0.0,
            poll_interval=0.05,
        ),
        simulation=SimulationConfig(),
    )


def make_record(task_id, workload_class, execution_time, finished=True):
    """A finished (or starved) task record with the given execution time."""
    task = Task(
        task_id=task_id,
        workload_class=workload_class,
        length=1000,
        required_cores=1,
        file_size=100,
        output_size=100,
    )
    if not finished:
        return CompletedTask(task=task, vm_id="vm-0", host_id=None)
    return CompletedTask(
        task=task,
        vm_id="vm-0",
        host_id="host-0",
        start_time=0.0,
        finish_time=execution_time,
        finished=True,
    )


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def mixed_records():
    return [
        make_record(0, WorkloadClass.PAGE_RENDERING, 2.0),
        make_record(1, WorkloadClass.PAGE_RENDERING, 4.0),
        make_record(2, WorkloadClass.API_PROCESSING, 1.0),
        make_record(3, WorkloadClass.BUILD_DEPLOY, 10.0),
        make_record(4, WorkloadClass.IMAGE_PROCESSING, 0.0, finished=False),
    ]
