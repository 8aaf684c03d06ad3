"""Discrete-event datacenter simulator using SimPy."""

import time
from dataclasses import dataclass
from typing import Dict, List, Optional

import simpy
from loguru import logger

from ..exceptions import ResourceModelError
from ..scheduling.baseline import RoundRobinBroker, VmAllocationPolicy, create_allocation_policy
from ..scheduling.time_shared import CloudletSchedulerTimeShared
from .events import EventBus, EventType, SimulationEvent
from .resources import Host, HostSpec, VirtualMachine, VmSpec
from .workload import CompletedTask, Task

# Remaining length (MI) below which a task counts as done
_COMPLETION_EPSILON = 1e-6


@dataclass
class SimulationConfig:
    """Configuration for simulation runs."""
    cost_per_second: float = 0.0042  # USD per second of task execution
    placement_policy: str = "worst_fit"
    max_time: Optional[float] = None  # None runs until every task is done


class SimulationEngine:
    """Runs a fixed task set on a fixed VM fleet until all tasks are done.

    VMs are placed on hosts first, then a broker binds every task to a VM
    up front. Each VM runs its tasks under a time-shared scheduler inside
    its own SimPy process; the clock advances from one task completion to
    the next.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        allocation_policy: Optional[VmAllocationPolicy] = None,
    ):
        self.config = config or SimulationConfig()
        self.allocation_policy = allocation_policy or create_allocation_policy(
            self.config.placement_policy
        )
        self.cloudlet_scheduler = CloudletSchedulerTimeShared()
        self.broker = RoundRobinBroker()
        self.event_bus = EventBus()

        self.env = simpy.Environment()
        self.hosts: Dict[str, Host] = {}
        self.vms: Dict[str, VirtualMachine] = {}
        self.records: Dict[int, CompletedTask] = {}

        logger.info("SimulationEngine initialized")

    @property
    def clock(self) -> float:
        """Current simulated time in seconds."""
        return self.env.now

    def host_utilization(self) -> Dict[str, Dict[str, float]]:
        """Fraction of each host's cores and RAM allocated to VMs."""
        return {host_id: host.get_utilization() for host_id, host in self.hosts.items()}

    def run(self, hosts: List[HostSpec], vms: List[VmSpec], tasks: List[Task]) -> List[CompletedTask]:
        """Simulate the task set and return one record per task, in id order.

        Raises:
            ResourceModelError: If there are no hosts, no VMs, or no VM fits
        """
        logger.info(f"Starting simulation: {len(hosts)} hosts, {len(vms)} VMs, {len(tasks)} tasks")
        start_time = time.time()

        self._reset()
        self._create_hosts(hosts)
        self._create_vms(vms)
        per_vm = self._submit_tasks(tasks)

        for vm_id, vm_tasks in per_vm.items():
            vm = self.vms[vm_id]
            if vm.is_placed and vm_tasks:
                self.env.process(self._vm_process(vm, vm_tasks))
            elif vm_tasks:
                logger.warning(f"{len(vm_tasks)} tasks bound to VM {vm_id} "
                               f"will never run - VM was not created")

        self.env.run(until=self.config.max_time)

        completed = [self.records[task.task_id] for task in tasks]
        finished = sum(1 for r in completed if r.finished)
        elapsed_time = time.time() - start_time
        logger.info(f"Simulation completed in {elapsed_time:.2f}s "
                    f"(simulated {self.env.now:.2f}s, {finished}/{len(completed)} tasks finished)")
        return completed

    def _reset(self) -> None:
        self.env = simpy.Environment()
        self.event_bus.clear()
        self.hosts = {}
        self.vms = {}
        self.records = {}
        self.broker = RoundRobinBroker()

    def _create_hosts(self, specs: List[HostSpec]) -> None:
        if not specs:
            raise ResourceModelError("Datacenter has no hosts")

        for i, spec in enumerate(specs):
            host = Host(f"host-{i}", spec)
            self.hosts[host.host_id] = host

    def _create_vms(self, specs: List[VmSpec]) -> None:
        if not specs:
            raise ResourceModelError("No VMs to create")

        hosts = list(self.hosts.values())
        for i, spec in enumerate(specs):
            vm = VirtualMachine(f"vm-{i}", spec)
            self.vms[vm.vm_id] = vm

            placed = self.allocation_policy.allocate(vm, hosts)
            event_type = EventType.VM_CREATED if placed else EventType.VM_FAILED
            self._publish(event_type, vm.vm_id, {"host_id": vm.host.host_id if vm.host else None})

        if not any(vm.is_placed for vm in self.vms.values()):
            raise ResourceModelError("No VM could be placed on any host")

    def _submit_tasks(self, tasks: List[Task]) -> Dict[str, List[Task]]:
        for task in tasks:
            self.records[task.task_id] = CompletedTask(task=task, submission_time=self.env.now)
            self._publish(EventType.TASK_SUBMITTED, f"task-{task.task_id}",
                          {"workload_class": task.workload_class.value})

        per_vm = self.broker.bind(tasks, list(self.vms.values()))

        for vm_id, vm_tasks in per_vm.items():
            host = self.vms[vm_id].host
            for task in vm_tasks:
                record = self.records[task.task_id]
                record.vm_id = vm_id
                record.host_id = host.host_id if host else None
                self._publish(EventType.TASK_QUEUED, f"task-{task.task_id}", {"vm_id": vm_id})

        return per_vm

    def _vm_process(self, vm: VirtualMachine, tasks: List[Task]):
        """Execute the VM's tasks concurrently under the time-shared scheduler."""
        running = list(tasks)
        remaining = {task.task_id: float(task.length) for task in running}

        for task in running:
            self.records[task.task_id].start_time = self.env.now
            self._publish(EventType.TASK_STARTED, f"task-{task.task_id}", {"vm_id": vm.vm_id})

        while running:
            rate = self.cloudlet_scheduler.processing_rate(vm.specs, running)
            delay = min(remaining[task.task_id] for task in running) / rate
            yield self.env.timeout(delay)

            still_running = []
            for task in running:
                remaining[task.task_id] -= rate * delay
                if remaining[task.task_id] <= _COMPLETION_EPSILON:
                    self._finish(task)
                else:
                    still_running.append(task)

            running = still_running
            for task in running:
                self._publish(EventType.TASK_PROGRESS, f"task-{task.task_id}",
                              {"remaining": remaining[task.task_id]})

    def _finish(self, task: Task) -> None:
        record = self.records[task.task_id]
        record.finish_time = self.env.now
        record.finished = True
        self._publish(EventType.TASK_FINISHED, f"task-{task.task_id}",
                      {"execution_time": record.execution_time})

    def _publish(self, event_type: EventType, resource_id: str, data: dict) -> None:
        self.event_bus.publish(SimulationEvent(
            timestamp=self.env.now,
            event_type=event_type,
            resource_id=resource_id,
            data=data,
        ))
