"""Time-shared cloudlet scheduling on a single VM."""

from typing import Iterable

from ..core.resources import VmSpec
from ..core.workload import Task


class CloudletSchedulerTimeShared:
    """All tasks on a VM run concurrently and divide its cores.

    A task's length is executed on each of its cores, so a task running
    alone finishes in ``length / mips``. When the running tasks request
    more cores than the VM has, every task gets the same fraction
    ``vm.cores / requested`` of a core.
    """

    def core_share(self, vm: VmSpec, running: Iterable[Task]) -> float:
        requested = sum(task.required_cores for task in running)
        if requested <= 0:
            return 1.0
        return min(1.0, vm.cores / requested)

    def processing_rate(self, vm: VmSpec, running: Iterable[Task]) -> float:
        """Million instructions per second each running task progresses by."""
        return vm.mips * self.core_share(vm, running)

    def estimate_finish_time(self, task: Task, vm: VmSpec) -> float:
        """Execution time of a task running alone on the VM."""
        return task.length / self.processing_rate(vm, [task])
