"""Evaluation and analysis modules."""

from .metrics import (
    ComparisonReport,
    CostReport,
    PerformanceReport,
    Recommendation,
    RecommendationReport,
    ResultsAnalyzer,
    Severity,
    SimulationAnalysis,
    calculate_accuracy,
    tasks_frame,
)

__all__ = [
    "ComparisonReport",
    "CostReport",
    "PerformanceReport",
    "Recommendation",
    "RecommendationReport",
    "ResultsAnalyzer",
    "Severity",
    "SimulationAnalysis",
    "calculate_accuracy",
    "tasks_frame",
]
