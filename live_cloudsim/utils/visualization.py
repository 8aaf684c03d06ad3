"""Visualization utilities for simulation results."""

from pathlib import Path
from typing import List

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
from loguru import logger

from ..evaluation.metrics import SimulationAnalysis


def create_plots(analysis: SimulationAnalysis, output_dir: Path) -> List[Path]:
    """Create HTML charts for one run and return their paths."""

    output_dir = Path(output_dir)
    logger.info(f"Creating plots in {output_dir}")
    output_dir.mkdir(parents=True, exist_ok=True)

    if analysis.tasks.empty:
        logger.warning("No tasks found for plotting")
        return []

    files = [
        plot_task_timeline(analysis.tasks, output_dir / "task_timeline.html"),
        plot_execution_times(analysis, output_dir / "execution_times.html"),
        plot_cost_breakdown(analysis, output_dir / "cost_breakdown.html"),
    ]

    logger.info("Plots created successfully")
    return files


def plot_task_timeline(tasks: pd.DataFrame, output_file: Path) -> Path:
    """Gantt-style chart of task execution per VM."""

    df = tasks[tasks["finished"].astype(bool)].copy()
    df["duration"] = df["finish_time"] - df["start_time"]
    df["label"] = "task-" + df["task_id"].astype(str)

    fig = go.Figure()
    for workload_class, group in df.groupby("workload_class", sort=False):
        fig.add_trace(go.Bar(
            x=group["duration"],
            y=group["vm_id"],
            base=group["start_time"],
            orientation="h",
            name=workload_class,
            text=group["label"],
        ))

    fig.update_layout(
        title="Task Execution Timeline",
        xaxis_title="Simulated time (s)",
        yaxis_title="VM",
        barmode="overlay",
    )
    fig.write_html(output_file)
    return output_file


def plot_execution_times(analysis: SimulationAnalysis, output_file: Path) -> Path:
    """Average execution time by workload class."""

    avg_times = analysis.performance.avg_execution_time_by_class
    df = pd.DataFrame({
        "workload_class": list(avg_times.keys()),
        "avg_execution_time": list(avg_times.values()),
    })

    fig = px.bar(
        df,
        x="workload_class",
        y="avg_execution_time",
        title=f"Average Execution Time - {analysis.project_name}",
        labels={"workload_class": "Workload", "avg_execution_time": "Seconds"},
    )
    fig.write_html(output_file)
    return output_file


def plot_cost_breakdown(analysis: SimulationAnalysis, output_file: Path) -> Path:
    """Cost share by workload class."""

    cost_by_class = analysis.cost.cost_by_class
    fig = go.Figure(go.Pie(
        labels=list(cost_by_class.keys()),
        values=list(cost_by_class.values()),
        hole=0.4,
    ))
    fig.update_layout(title=f"Cost Breakdown (${analysis.cost.total_cost:.4f} total)")
    fig.write_html(output_file)
    return output_file
