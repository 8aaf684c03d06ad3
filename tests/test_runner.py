"""End-to-end tests for a full simulation run."""

import pytest

from live_cloudsim.core.scaling import ScaleFactors
from live_cloudsim.runner import LiveSimulation
from live_cloudsim.telemetry.snapshot import Snapshot


class FixedSource:
    def __init__(self, snapshot):
        self.snapshot = snapshot

    def fetch_latest(self):
        return self.snapshot


class FailingSource:
    def fetch_latest(self):
        raise RuntimeError("metrics backend crashed")


def no_sleep(seconds):
    pass


class TestStandaloneRun:

    def test_uses_synthetic_snapshot_and_unit_factors(self, fast_config):
        result = LiveSimulation(fast_config).run()

        assert not result.telemetry_enabled
        assert result.snapshot.synthetic
        assert result.factors == ScaleFactors.unit()
        assert 25.0 <= result.snapshot.cpu_usage_pct <= 60.0
        assert 80.0 <= result.snapshot.response_time_ms <= 200.0

    def test_every_task_finishes(self, fast_config):
        result = LiveSimulation(fast_config).run()

        assert len(result.completed) == 23
        assert result.analysis.performance.success_ratio == 1.0
        assert result.analysis.comparison is None
        assert result.simulated_time > 0

    def test_same_seed_same_result(self, fast_config):
        first = LiveSimulation(fast_config).run()
        second = LiveSimulation(fast_config).run()

        assert first.snapshot == second.snapshot
        assert first.analysis.cost.total_cost == pytest.approx(second.analysis.cost.total_cost)


class TestTelemetryRun:

    def test_real_metrics_drive_the_run(self, fast_config, metrics_file, real_factors):
        fast_config.telemetry.enabled = True
        fast_config.telemetry.metrics_path = str(metrics_file)

        simulation = LiveSimulation(fast_config, sleep=no_sleep)
        result = simulation.run()

        assert result.telemetry_enabled
        assert result.snapshot.project_name == "shop-frontend"
        assert not result.snapshot.synthetic
        assert result.factors == real_factors
        assert len(result.completed) == 34
        assert result.analysis.comparison is not None
        assert result.analysis.cost.cost_per_request == pytest.approx(result.analysis.cost.total_cost / 1547)
        assert simulation.poller is None

    def test_missing_metrics_fall_back_to_synthetic(self, fast_config):
        fast_config.telemetry.enabled = True

        result = LiveSimulation(fast_config, sleep=no_sleep).run()

        assert result.snapshot.synthetic
        assert result.factors == ScaleFactors.unit()
        assert result.analysis.comparison is None

    def test_snapshot_is_read_once(self, fast_config):
        fast_config.telemetry.enabled = True
        source = FixedSource(Snapshot(cpu_usage_pct=80.0, response_time_ms=150.0, request_count=50.0))
        simulation = LiveSimulation(fast_config, source=source, sleep=no_sleep)

        snapshot = simulation.acquire_snapshot()
        source.snapshot = Snapshot(cpu_usage_pct=10.0)
        simulation.stop()

        assert snapshot.cpu_usage_pct == 80.0

    def test_poller_stops_when_engine_fails(self, fast_config, monkeypatch):
        fast_config.telemetry.enabled = True
        simulation = LiveSimulation(fast_config, sleep=no_sleep)

        def broken_run(hosts, vms, tasks):
            raise RuntimeError("engine failure")

        monkeypatch.setattr(simulation.engine, "run", broken_run)

        with pytest.raises(RuntimeError):
            simulation.run()
        assert simulation.poller is None

    def test_undecodable_metrics_fall_back_to_synthetic(self, fast_config, tmp_path):
        broken = tmp_path / "cloudsim-metrics.json"
        broken.write_bytes(b'{"cpuUsage": 50, "projectName": "\xff\xfe"}')
        fast_config.telemetry.enabled = True
        fast_config.telemetry.metrics_path = str(broken)

        simulation = LiveSimulation(fast_config, sleep=no_sleep)
        result = simulation.run()

        assert result.snapshot.synthetic
        assert result.analysis.performance.success_ratio == 1.0
        assert simulation.poller is None

    def test_unexpected_source_error_falls_back_to_synthetic(self, fast_config):
        fast_config.telemetry.enabled = True
        simulation = LiveSimulation(fast_config, source=FailingSource(), sleep=no_sleep)

        result = simulation.run()

        assert result.snapshot.synthetic
        assert simulation.poller is None

    def test_poller_stops_when_snapshot_acquisition_fails(self, fast_config):
        fast_config.telemetry.enabled = True

        def interrupted_sleep(seconds):
            raise RuntimeError("interrupted while settling")

        simulation = LiveSimulation(fast_config, source=FailingSource(), sleep=interrupted_sleep)

        with pytest.raises(RuntimeError):
            simulation.run()
        assert simulation.poller is None


def test_host_utilization_is_reported(fast_config):
    result = LiveSimulation(fast_config).run()

    assert set(result.host_utilization) == {"host-0", "host-1", "host-2"}
    for usage in result.host_utilization.values():
        assert 0.0 <= usage["cpu_utilization"] <= 1.0
    assert result.host_utilization["host-0"]["cpu_utilization"] > 0.0
