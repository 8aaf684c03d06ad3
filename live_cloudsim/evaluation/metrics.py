"""Simulation analysis: performance, cost, comparison and recommendation reports."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from loguru import logger

from ..core.workload import CompletedTask, WorkloadClass
from ..telemetry.snapshot import Snapshot

DEFAULT_COST_PER_SECOND = 0.0042  # USD per second of execution

TASK_COLUMNS = [
    "task_id", "workload_class", "status", "host_id", "vm_id", "required_cores",
    "length", "submission_time", "start_time", "finish_time", "execution_time", "finished",
]

GENERAL_TIPS = [
    "Implement proper caching strategies (Redis, CDN)",
    "Use Next.js Image optimization for better performance",
    "Monitor Core Web Vitals and optimize accordingly",
    "Consider serverless functions for API routes",
    "Implement proper database indexing and query optimization",
]


@dataclass
class PerformanceReport:
    """Success ratio and execution times by workload class."""
    total_tasks: int
    finished_tasks: int
    success_ratio: float
    total_execution_time: float
    avg_execution_time_by_class: Dict[str, float] = field(default_factory=dict)
    task_count_by_class: Dict[str, int] = field(default_factory=dict)

    @property
    def failed_tasks(self) -> int:
        return self.total_tasks - self.finished_tasks


@dataclass
class CostReport:
    """Execution cost estimate."""
    cost_per_second: float
    total_cost: float
    hourly_cost: float
    monthly_cost: float
    cost_per_request: float
    cost_by_class: Dict[str, float] = field(default_factory=dict)
    cost_share_by_class: Dict[str, float] = field(default_factory=dict)  # percent


@dataclass
class ComparisonReport:
    """Real application response time against the simulated average."""
    real_response_time_ms: float
    simulated_avg_time_ms: float
    accuracy_pct: Optional[float]
    real_cpu_usage_pct: float
    real_request_count: float


class Severity(Enum):
    OK = "ok"
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass
class Recommendation:
    category: str
    severity: Severity
    message: str
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "severity": self.severity.value,
            "message": self.message,
            "hint": self.hint,
        }


@dataclass
class RecommendationReport:
    performance: List[Recommendation] = field(default_factory=list)
    infrastructure: List[Recommendation] = field(default_factory=list)
    general_tips: List[str] = field(default_factory=lambda: list(GENERAL_TIPS))

    @property
    def all(self) -> List[Recommendation]:
        return self.performance + self.infrastructure


@dataclass
class SimulationAnalysis:
    """All reports of one run."""
    project_name: str
    performance: PerformanceReport
    cost: CostReport
    recommendations: RecommendationReport
    comparison: Optional[ComparisonReport] = None
    tasks: pd.DataFrame = field(default_factory=lambda: pd.DataFrame(columns=TASK_COLUMNS))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_name": self.project_name,
            "performance": asdict(self.performance),
            "cost": asdict(self.cost),
            "comparison": asdict(self.comparison) if self.comparison else None,
            "recommendations": {
                "performance": [r.to_dict() for r in self.recommendations.performance],
                "infrastructure": [r.to_dict() for r in self.recommendations.infrastructure],
                "general_tips": list(self.recommendations.general_tips),
            },
            "tasks": self.tasks.to_dict(orient="records"),
        }


def tasks_frame(completed: List[CompletedTask]) -> pd.DataFrame:
    """One row per task, in task id order."""
    rows = [
        {
            "task_id": r.task_id,
            "workload_class": r.workload_class.value,
            "status": r.status,
            "host_id": r.host_id,
            "vm_id": r.vm_id,
            "required_cores": r.task.required_cores,
            "length": r.task.length,
            "submission_time": r.submission_time,
            "start_time": r.start_time,
            "finish_time": r.finish_time,
            "execution_time": r.execution_time,
            "finished": r.finished,
        }
        for r in completed
    ]
    return pd.DataFrame(rows, columns=TASK_COLUMNS)


def calculate_accuracy(real: float, simulated: float) -> Optional[float]:
    """Percentage agreement of two positive values; None if either is not positive."""
    if real <= 0 or simulated <= 0:
        return None
    return max(0.0, 100.0 - abs(real - simulated) / max(real, simulated) * 100.0)


class ResultsAnalyzer:
    """Builds the four reports from finished tasks and the run's snapshot."""

    def __init__(self, cost_per_second: float = DEFAULT_COST_PER_SECOND):
        if cost_per_second < 0:
            raise ValueError("cost_per_second must be a non-negative number")
        self.cost_per_second = cost_per_second
        self.logger = logger.bind(component="ResultsAnalyzer")

    def _finished_by_class(self, completed: List[CompletedTask]) -> pd.DataFrame:
        df = tasks_frame(completed)
        finished = df[df["finished"].astype(bool)]
        return finished.groupby("workload_class", sort=False)["execution_time"].agg(["sum", "count", "mean"])

    def performance_report(self, completed: List[CompletedTask]) -> PerformanceReport:
        total = len(completed)
        finished = [r for r in completed if r.finished]
        by_class = self._finished_by_class(completed)

        return PerformanceReport(
            total_tasks=total,
            finished_tasks=len(finished),
            success_ratio=len(finished) / total if total else 0.0,
            total_execution_time=float(sum(r.execution_time for r in finished)),
            avg_execution_time_by_class={k: float(v) for k, v in by_class["mean"].items()},
            task_count_by_class={k: int(v) for k, v in by_class["count"].items()},
        )

    def cost_report(self, completed: List[CompletedTask], snapshot: Snapshot) -> CostReport:
        by_class = self._finished_by_class(completed)
        cost_by_class = {k: float(v) * self.cost_per_second for k, v in by_class["sum"].items()}
        total_cost = float(sum(cost_by_class.values()))

        # Total task cost is read as the hourly run rate
        hourly_cost = total_cost
        monthly_cost = hourly_cost * 24 * 30

        if total_cost > 0:
            shares = {k: v / total_cost * 100.0 for k, v in cost_by_class.items()}
        else:
            shares = {k: 0.0 for k in cost_by_class}

        return CostReport(
            cost_per_second=self.cost_per_second,
            total_cost=total_cost,
            hourly_cost=hourly_cost,
            monthly_cost=monthly_cost,
            cost_per_request=total_cost / max(1.0, snapshot.request_count),
            cost_by_class=cost_by_class,
            cost_share_by_class=shares,
        )

    def comparison_report(self, completed: List[CompletedTask], snapshot: Snapshot) -> Optional[ComparisonReport]:
        """Real vs simulated timing; None when the snapshot is synthetic."""
        if snapshot.synthetic:
            return None

        times_ms = [r.execution_time * 1000.0 for r in completed if r.finished]
        simulated = float(np.mean(times_ms)) if times_ms else 0.0

        return ComparisonReport(
            real_response_time_ms=snapshot.response_time_ms,
            simulated_avg_time_ms=simulated,
            accuracy_pct=calculate_accuracy(snapshot.response_time_ms, simulated),
            real_cpu_usage_pct=snapshot.cpu_usage_pct,
            real_request_count=snapshot.request_count,
        )

    def recommendation_report(self, completed: List[CompletedTask], snapshot: Snapshot) -> RecommendationReport:
        """Threshold rules; each rule is evaluated on its own."""
        avg_times = self.performance_report(completed).avg_execution_time_by_class
        report = RecommendationReport()

        page_time = avg_times.get(WorkloadClass.PAGE_RENDERING.value)
        if page_time is not None:
            if page_time > 8:
                report.performance.append(Recommendation(
                    "page_rendering", Severity.WARNING,
                    f"Page rendering is slow ({page_time:.1f}s avg)",
                    "Consider: Static generation, ISR, or caching",
                ))
            else:
                report.performance.append(Recommendation(
                    "page_rendering", Severity.OK,
                    f"Page rendering is optimal ({page_time:.1f}s avg)",
                ))

        api_time = avg_times.get(WorkloadClass.API_PROCESSING.value)
        if api_time is not None:
            if api_time > 5:
                report.performance.append(Recommendation(
                    "api_processing", Severity.WARNING,
                    f"API processing is slow ({api_time:.1f}s avg)",
                    "Consider: Database optimization, API caching, rate limiting",
                ))
            else:
                report.performance.append(Recommendation(
                    "api_processing", Severity.OK,
                    f"API performance is excellent ({api_time:.1f}s avg)",
                ))

        cpu = snapshot.cpu_usage_pct
        if cpu > 70:
            report.infrastructure.append(Recommendation(
                "cpu", Severity.CRITICAL,
                f"High CPU usage ({cpu:.1f}%) - Scale up recommended",
                "Add more CPU cores or horizontal scaling",
            ))
        elif cpu < 25:
            report.infrastructure.append(Recommendation(
                "cpu", Severity.INFO,
                f"Low CPU usage ({cpu:.1f}%) - Cost optimization opportunity",
                "Consider smaller instance sizes",
            ))
        else:
            report.infrastructure.append(Recommendation(
                "cpu", Severity.OK, f"CPU usage is optimal ({cpu:.1f}%)",
            ))

        response = snapshot.response_time_ms
        if response > 200:
            report.infrastructure.append(Recommendation(
                "response_time", Severity.WARNING,
                f"Slow response times ({response:.1f}ms)",
                "Optimize: Database queries, add caching, CDN implementation",
            ))
        elif response < 50:
            report.infrastructure.append(Recommendation(
                "response_time", Severity.OK, f"Excellent response times ({response:.1f}ms)",
            ))
        else:
            report.infrastructure.append(Recommendation(
                "response_time", Severity.OK, f"Good response times ({response:.1f}ms)",
            ))

        return report

    def analyze(self, completed: List[CompletedTask], snapshot: Snapshot) -> SimulationAnalysis:
        """Build every report for one run."""
        self.logger.info(f"Analyzing {len(completed)} tasks for {snapshot.project_name}")

        analysis = SimulationAnalysis(
            project_name=snapshot.project_name,
            performance=self.performance_report(completed),
            cost=self.cost_report(completed, snapshot),
            comparison=self.comparison_report(completed, snapshot),
            recommendations=self.recommendation_report(completed, snapshot),
            tasks=tasks_frame(completed),
        )

        self.logger.info(f"Analysis completed. Success ratio: {analysis.performance.success_ratio:.1%}, "
                         f"estimated monthly cost: ${analysis.cost.monthly_cost:.2f}")
        return analysis
