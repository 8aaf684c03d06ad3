"""Workload models and generation."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from loguru import logger

from .scaling import ScaleFactors


class WorkloadClass(Enum):
    """Types of workloads."""
    PAGE_RENDERING = "Page Rendering"
    API_PROCESSING = "API Processing"
    STATIC_ASSET = "Static Assets"
    IMAGE_PROCESSING = "Image Processing"
    BUILD_DEPLOY = "Build/Deploy"


@dataclass(frozen=True)
class WorkloadTemplate:
    """Count, length and footprint rules for one workload class.

    Traffic-scaled classes multiply their count by the load factor and
    their length by the response factor; the rest are fixed-cost
    operational work.
    """
    workload_class: WorkloadClass
    base_count: int
    min_count: int
    base_length: int
    length_step: int
    required_cores: int
    file_size: int
    output_size: int
    traffic_scaled: bool = False


WORKLOAD_TEMPLATES: Tuple[WorkloadTemplate, ...] = (
    WorkloadTemplate(WorkloadClass.PAGE_RENDERING, 6, 4, 9000, 1200, 2, 400, 350, traffic_scaled=True),
    WorkloadTemplate(WorkloadClass.API_PROCESSING, 8, 5, 4500, 700, 1, 600, 500, traffic_scaled=True),
    WorkloadTemplate(WorkloadClass.STATIC_ASSET, 4, 4, 1800, 400, 1, 200, 1800),
    WorkloadTemplate(WorkloadClass.IMAGE_PROCESSING, 3, 3, 16000, 2500, 3, 1200, 900),
    WorkloadTemplate(WorkloadClass.BUILD_DEPLOY, 2, 2, 32000, 6000, 4, 800, 600),
)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class Task:
    """A schedulable unit of work (cloudlet); length is in million instructions."""
    task_id: int
    workload_class: WorkloadClass
    length: int
    required_cores: int
    file_size: int
    output_size: int


@dataclass
class CompletedTask:
    """A task together with what the simulation observed for it."""
    task: Task
    vm_id: Optional[str] = None
    host_id: Optional[str] = None
    submission_time: float = 0.0
    start_time: Optional[float] = None
    finish_time: Optional[float] = None
    finished: bool = False

    @property
    def task_id(self) -> int:
        return self.task.task_id

    @property
    def workload_class(self) -> WorkloadClass:
        return self.task.workload_class

    @property
    def execution_time(self) -> float:
        """Seconds from start to finish; 0.0 for unfinished tasks."""
        if not self.finished or self.start_time is None or self.finish_time is None:
            return 0.0
        return self.finish_time - self.start_time

    @property
    def status(self) -> str:
        if self.finished:
            return "SUCCESS"
        return "RUNNING" if self.start_time is not None else "NOT_STARTED"


@dataclass
class Workload:
    """Tasks built for one run plus the id -> class mapping used for reporting."""
    tasks: List[Task]
    class_of: Dict[int, WorkloadClass]

    def count(self, workload_class: WorkloadClass) -> int:
        return sum(1 for wc in self.class_of.values() if wc == workload_class)


class WorkloadGenerator:
    """Materializes the scaled task set for a run."""

    def __init__(self, templates: Tuple[WorkloadTemplate, ...] = WORKLOAD_TEMPLATES):
        self.templates = templates

    def task_count(self, template: WorkloadTemplate, factors: ScaleFactors) -> int:
        if not template.traffic_scaled:
            return template.base_count
        return max(template.min_count, round_half_up(template.base_count * factors.load))

    def task_length(self, template: WorkloadTemplate, index: int, factors: ScaleFactors) -> int:
        length = template.base_length + index * template.length_step
        if template.traffic_scaled:
            return int(length * factors.response)
        return length

    def build(self, factors: ScaleFactors) -> Workload:
        """Build all tasks; ids run sequentially across classes in table order."""
        tasks: List[Task] = []
        class_of: Dict[int, WorkloadClass] = {}

        task_id = 0
        for template in self.templates:
            for i in range(self.task_count(template, factors)):
                task = Task(
                    task_id=task_id,
                    workload_class=template.workload_class,
                    length=self.task_length(template, i, factors),
                    required_cores=template.required_cores,
                    file_size=template.file_size,
                    output_size=template.output_size,
                )
                tasks.append(task)
                class_of[task_id] = template.workload_class
                task_id += 1

        logger.info(f"Created {len(tasks)} cloudlets (response multiplier: "
                    f"{factors.response:.2f}, request multiplier: {factors.load:.2f})")
        return Workload(tasks=tasks, class_of=class_of)
