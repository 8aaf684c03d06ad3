"""Scheduling algorithms and policies."""

from .baseline import (
    PlacementPolicy,
    VmAllocationPolicy,
    FirstFitAllocation,
    WorstFitAllocation,
    RoundRobinBroker,
    create_allocation_policy,
)
from .time_shared import CloudletSchedulerTimeShared

__all__ = [
    "PlacementPolicy",
    "VmAllocationPolicy",
    "FirstFitAllocation",
    "WorstFitAllocation",
    "RoundRobinBroker",
    "create_allocation_policy",
    "CloudletSchedulerTimeShared",
]
