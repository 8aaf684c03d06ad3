"""Command-line interface for the telemetry-driven simulator."""

import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .evaluation.metrics import ComparisonReport, CostReport, PerformanceReport, RecommendationReport, Severity
from .exceptions import ResourceModelError, TelemetryMalformed, TelemetryUnavailable
from .runner import LiveSimulation, RunResult
from .telemetry.snapshot import Snapshot
from .telemetry.sources import FileSnapshotSource, SyntheticSnapshotGenerator
from .utils.config import Config, load_config, save_results
from .utils.visualization import create_plots

app = typer.Typer(name="live-cloudsim", help="Telemetry-driven cloud cost and performance simulator")
console = Console()

SEVERITY_STYLES = {
    Severity.OK: ("✅", "green"),
    Severity.INFO: ("💰", "cyan"),
    Severity.WARNING: ("⚠️", "yellow"),
    Severity.CRITICAL: ("🚨", "bold red"),
}


@app.command()
def simulate(
    monitor: bool = typer.Option(False, "--monitor", "-m", help="Enable real-time telemetry mode"),
    metrics_path: Optional[Path] = typer.Option(None, "--metrics-path", "-p", help="Metrics file exported by the app"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory"),
    plots: bool = typer.Option(False, "--plots", help="Write HTML charts to the output directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Run one simulation parameterized by the application's telemetry."""

    if verbose:
        logger.remove()
        logger.add("logs/simulation_{time}.log", level="DEBUG")
        logger.add(lambda msg: console.print(msg, style="dim", end=""), level="DEBUG")

    if config and config.exists():
        sim_config = load_config(config)
        console.print(f"📋 Loaded configuration from {config}")
    else:
        sim_config = Config()

    if monitor:
        sim_config.telemetry.enabled = True
    if metrics_path:
        sim_config.telemetry.metrics_path = str(metrics_path)

    if sim_config.telemetry.enabled:
        console.print("🔥 Real-time monitoring enabled", style="bold blue")
        console.print(f"📁 Looking for metrics file: {sim_config.telemetry.metrics_path}")
    else:
        console.print("🔧 Running simulation in standalone mode", style="bold blue")

    try:
        result = LiveSimulation(sim_config).run()
    except ResourceModelError as e:
        console.print(f"❌ Simulation setup failed: {e}", style="bold red")
        raise typer.Exit(code=1)

    display_report(result)

    if output:
        output_dir = Path(output)
        save_results(result.analysis.to_dict(), output_dir)
        result.analysis.tasks.to_csv(output_dir / "tasks.csv", index=False)
        if plots:
            create_plots(result.analysis, output_dir)
        console.print(f"💾 Results saved to {output_dir}")

    console.print(f"✅ Analysis completed for {result.snapshot.project_name}!", style="bold green")


@app.command()
def snapshot(
    metrics_path: Optional[Path] = typer.Option(None, "--metrics-path", "-p", help="Metrics file exported by the app"),
) -> None:
    """Show the snapshot the poller would currently publish."""

    source = FileSnapshotSource(metrics_path) if metrics_path else FileSnapshotSource()
    try:
        current = source.fetch_latest()
    except (TelemetryUnavailable, TelemetryMalformed) as e:
        console.print(f"⚠️  Could not read real data: {e}", style="yellow")
        current = None

    if current is None:
        console.print("📊 No metrics file found - a synthetic snapshot would be used", style="yellow")
        current = SyntheticSnapshotGenerator(random_seed=None).generate()
    display_current_metrics(current)


def display_report(result: RunResult) -> None:
    """Print the report sections in their fixed order."""
    analysis = result.analysis

    display_banner(result)
    if result.telemetry_enabled:
        display_current_metrics(result.snapshot)
    display_task_table(result)
    display_performance(analysis.project_name, analysis.performance)
    display_cost(analysis.cost)
    if result.telemetry_enabled:
        display_comparison(analysis.comparison)
    display_recommendations(analysis.project_name, analysis.recommendations)


def display_banner(result: RunResult) -> None:
    factors = result.factors
    lines = [
        f"CloudSim Analysis for Existing Next.js App: [bold]{result.snapshot.project_name}[/bold]",
        f"{len(result.resources.hosts)} hosts, {len(result.resources.vms)} VMs, "
        f"{len(result.workload.tasks)} tasks | CPU scale {factors.cpu:.2f}, "
        f"response scale {factors.response:.2f}, load scale {factors.load:.2f}",
    ]
    for host_id, usage in result.host_utilization.items():
        lines.append(f"{host_id}: {usage['cpu_utilization']:.0%} cores, "
                     f"{usage['memory_utilization']:.0%} RAM allocated")
    console.print(Panel("\n".join(lines), title="🎯 Live CloudSim"))


def display_current_metrics(snapshot: Snapshot) -> None:
    table = Table(title=f"📊 Current Application Metrics for {snapshot.project_name}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    rows = [
        ("Response Time", f"{snapshot.response_time_ms:.2f} ms"),
        ("CPU Usage", f"{snapshot.cpu_usage_pct:.1f}%"),
        ("Memory Usage", f"{snapshot.memory_usage_mb:.1f} MB"),
        ("Total Requests", f"{snapshot.request_count:.0f}"),
        ("Active Connections", f"{snapshot.active_connections:.0f}"),
    ]
    for category, views in snapshot.page_views.items():
        rows.append((f"Page views ({category})", f"{views:.0f}"))
    if snapshot.synthetic:
        rows.append(("Source", "synthetic"))

    for metric, value in rows:
        table.add_row(metric, value)
    console.print(table)


def display_task_table(result: RunResult) -> None:
    table = Table(title="Simulation Results")
    for column in ("Task", "Status", "Workload", "Host", "VM", "Cores", "Length (MI)",
                   "Start (s)", "Finish (s)", "Exec (s)"):
        table.add_column(column, justify="right" if column not in ("Status", "Workload") else "left")

    for record in result.completed:
        table.add_row(
            str(record.task_id),
            record.status,
            record.workload_class.value,
            record.host_id or "-",
            record.vm_id or "-",
            str(record.task.required_cores),
            str(record.task.length),
            f"{record.start_time:.2f}" if record.start_time is not None else "-",
            f"{record.finish_time:.2f}" if record.finish_time is not None else "-",
            f"{record.execution_time:.2f}",
        )
    console.print(table)


def display_performance(project_name: str, report: PerformanceReport) -> None:
    console.print(f"\n📈 Performance Analysis for {project_name}", style="bold")
    console.print(f"✅ Successful simulations: {report.finished_tasks}/{report.total_tasks} "
                  f"({report.success_ratio:.1%})")
    console.print(f"⏱️  Total simulation time: {report.total_execution_time:.2f} seconds")

    table = Table(title="Average execution times by component")
    table.add_column("Workload", style="cyan")
    table.add_column("Tasks", justify="right")
    table.add_column("Avg (s)", justify="right", style="green")
    for workload_class, avg_time in report.avg_execution_time_by_class.items():
        table.add_row(workload_class, str(report.task_count_by_class[workload_class]), f"{avg_time:.2f}")
    console.print(table)


def display_cost(report: CostReport) -> None:
    console.print("\n💰 Infrastructure Cost Analysis", style="bold")
    console.print(f"💵 Estimated hourly cost: ${report.hourly_cost:.4f}")
    console.print(f"📅 Estimated monthly cost: ${report.monthly_cost:.2f}")
    console.print(f"📊 Cost per request: ${report.cost_per_request:.6f}")

    table = Table(title="Cost breakdown by component")
    table.add_column("Workload", style="cyan")
    table.add_column("Cost", justify="right", style="green")
    table.add_column("Share", justify="right", style="yellow")
    for workload_class, cost in report.cost_by_class.items():
        table.add_row(workload_class, f"${cost:.4f}", f"{report.cost_share_by_class[workload_class]:.1f}%")
    console.print(table)


def display_comparison(report: Optional[ComparisonReport]) -> None:
    console.print("\n🔄 Real App vs Simulation Comparison", style="bold")
    if report is None:
        console.print("  No real telemetry was available - comparison skipped", style="yellow")
        return

    console.print(f"🌐 Real Response Time: {report.real_response_time_ms:.2f} ms")
    console.print(f"🖥️  Simulated Avg Time: {report.simulated_avg_time_ms:.2f} ms")
    if report.accuracy_pct is not None:
        console.print(f"🎯 Simulation accuracy: {report.accuracy_pct:.1f}%")
    console.print(f"📊 Real CPU Usage: {report.real_cpu_usage_pct:.1f}% (influenced infrastructure scaling)")
    console.print(f"💻 Real Request Count: {report.real_request_count:.0f} (scaled workload generation)")


def display_recommendations(project_name: str, report: RecommendationReport) -> None:
    console.print(f"\n💡 Optimization Recommendations for {project_name}", style="bold")

    for heading, recommendations in (
        ("🎯 Performance Recommendations:", report.performance),
        ("🔧 Infrastructure Recommendations:", report.infrastructure),
    ):
        console.print(heading)
        for rec in recommendations:
            icon, style = SEVERITY_STYLES[rec.severity]
            console.print(f"  {icon} {rec.message}", style=style)
            if rec.hint:
                console.print(f"     💡 {rec.hint}")

    console.print("\n🌍 General Next.js Optimization Tips:")
    for tip in report.general_tips:
        console.print(f"  • {tip}")


def main() -> None:
    """Main entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("Interrupted", style="yellow")
        sys.exit(130)


if __name__ == "__main__":
    main()
