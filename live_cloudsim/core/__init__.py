"""Core simulation components."""

from .scaling import ScaleFactors, ScalingPolicy
from .resources import Host, HostSpec, ResourceModel, ResourceModelBuilder, VirtualMachine, VmSpec
from .workload import CompletedTask, Task, Workload, WorkloadClass, WorkloadGenerator
from .events import EventType, SimulationEvent

__all__ = [
    "ScaleFactors",
    "ScalingPolicy",
    "Host",
    "HostSpec",
    "ResourceModel",
    "ResourceModelBuilder",
    "VirtualMachine",
    "VmSpec",
    "CompletedTask",
    "Task",
    "Workload",
    "WorkloadClass",
    "WorkloadGenerator",
    "EventType",
    "SimulationEvent",
]
