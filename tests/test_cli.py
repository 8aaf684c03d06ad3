"""Tests for the command-line interface."""

import json

import pytest
import yaml
from typer.testing import CliRunner

from live_cloudsim.cli import app
from live_cloudsim.exceptions import ResourceModelError
from live_cloudsim.runner import LiveSimulation

runner = CliRunner()


@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def monitor_config(tmp_path, metrics_file):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "telemetry": {
            "metrics_path": str(metrics_file),
            "fallback_dirs": [],
            "settle_delay": 0.0,
            "poll_interval": 0.05,
        },
    }))
    return path


def test_standalone_report_sections(workdir):
    result = runner.invoke(app, ["simulate"])

    assert result.exit_code == 0, result.output
    out = result.output
    assert "standalone mode" in out
    assert "Current Application Metrics" not in out
    assert "Real App vs Simulation" not in out
    assert "host-0:" in out

    sections = [
        "Live CloudSim",
        "Simulation Results",
        "Performance Analysis",
        "Infrastructure Cost Analysis",
        "Optimization Recommendations",
        "General Next.js Optimization Tips",
    ]
    positions = [out.index(section) for section in sections]
    assert positions == sorted(positions)


def test_monitor_mode_shows_metrics_and_comparison(monitor_config):
    result = runner.invoke(app, ["simulate", "--monitor", "--config", str(monitor_config)])

    assert result.exit_code == 0, result.output
    out = result.output
    assert "Real-time monitoring enabled" in out
    assert "shop-frontend" in out
    assert out.index("Current Application Metrics") < out.index("Simulation Results")
    assert out.index("Infrastructure Cost Analysis") < out.index("Real App vs Simulation")
    assert out.index("Real App vs Simulation") < out.index("Optimization Recommendations")


def test_output_directory(workdir):
    result = runner.invoke(app, ["simulate", "--output", "results", "--plots"])

    assert result.exit_code == 0, result.output
    results_dir = workdir / "results"
    data = json.loads((results_dir / "simulation_results.json").read_text())
    assert data["performance"]["total_tasks"] == 23
    assert data["comparison"] is None
    assert (results_dir / "tasks.csv").exists()
    assert (results_dir / "task_timeline.html").exists()
    assert (results_dir / "cost_breakdown.html").exists()


def test_setup_failure_exits_nonzero(monkeypatch):
    def failing_run(self):
        raise ResourceModelError("No VM could be placed on any host")

    monkeypatch.setattr(LiveSimulation, "run", failing_run)

    result = runner.invoke(app, ["simulate"])

    assert result.exit_code == 1
    assert "Simulation setup failed" in result.output


def test_snapshot_command_reads_file(metrics_file):
    result = runner.invoke(app, ["snapshot", "--metrics-path", str(metrics_file)])

    assert result.exit_code == 0, result.output
    assert "shop-frontend" in result.output
    assert "synthetic" not in result.output


def test_snapshot_command_without_file(workdir):
    result = runner.invoke(app, ["snapshot", "--metrics-path", str(workdir / "missing.json")])

    assert result.exit_code == 0, result.output
    assert "synthetic" in result.output


def test_snapshot_command_with_undecodable_file(workdir):
    broken = workdir / "cloudsim-metrics.json"
    broken.write_bytes(b'{"cpuUsage": 50, "projectName": "\xff\xfe"}')

    result = runner.invoke(app, ["snapshot", "--metrics-path", str(broken)])

    assert result.exit_code == 0, result.output
    assert "Could not read real data" in result.output
    assert "synthetic" in result.output
