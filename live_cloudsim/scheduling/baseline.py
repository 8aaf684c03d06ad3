"""VM placement and task brokering policies."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional

from loguru import logger

from ..core.resources import Host, VirtualMachine
from ..core.workload import Task


class PlacementPolicy(Enum):
    """Placement policies for VM allocation."""
    FIRST_FIT = "first_fit"
    WORST_FIT = "worst_fit"


class VmAllocationPolicy(ABC):
    """Abstract base class for choosing the host of a VM."""

    def __init__(self, placement_policy: PlacementPolicy):
        self.placement_policy = placement_policy
        logger.info(f"VM allocation initialized with {placement_policy.value} policy")

    @abstractmethod
    def select_host(self, vm: VirtualMachine, hosts: List[Host]) -> Optional[Host]:
        """Pick a host for the VM, or None if no host can take it."""

    def allocate(self, vm: VirtualMachine, hosts: List[Host]) -> bool:
        """Place the VM, marking it failed when no host fits."""
        host = self.select_host(vm, hosts)
        if host is None or not vm.place_on(host):
            vm.fail("insufficient host resources")
            return False

        return True


class FirstFitAllocation(VmAllocationPolicy):
    """First host, in creation order, that can accommodate the VM."""

    def __init__(self):
        super().__init__(PlacementPolicy.FIRST_FIT)

    def select_host(self, vm: VirtualMachine, hosts: List[Host]) -> Optional[Host]:
        for host in hosts:
            if host.can_accommodate(vm.specs):
                return host
        return None


class WorstFitAllocation(VmAllocationPolicy):
    """Host with the most free cores that can accommodate the VM."""

    def __init__(self):
        super().__init__(PlacementPolicy.WORST_FIT)

    def select_host(self, vm: VirtualMachine, hosts: List[Host]) -> Optional[Host]:
        suitable = [h for h in hosts if h.can_accommodate(vm.specs)]
        if not suitable:
            return None
        # max() keeps the first host on ties
        return max(suitable, key=lambda h: h.free_cores)


class RoundRobinBroker:
    """Binds every submitted task to a VM, cycling through VMs in submission order.

    Binding happens once, upfront. Tasks bound to a VM that never started
    are never executed.
    """

    def bind(self, tasks: List[Task], vms: List[VirtualMachine]) -> Dict[str, List[Task]]:
        if not vms:
            raise ValueError("Cannot bind tasks without VMs")

        per_vm: Dict[str, List[Task]] = {vm.vm_id: [] for vm in vms}
        for i, task in enumerate(tasks):
            vm = vms[i % len(vms)]
            per_vm[vm.vm_id].append(task)

        logger.info(f"Broker bound {len(tasks)} tasks to {len(vms)} VMs")
        return per_vm


def create_allocation_policy(policy: str) -> VmAllocationPolicy:
    """Create a VM allocation policy by name."""
    policies = {
        PlacementPolicy.FIRST_FIT.value: FirstFitAllocation,
        PlacementPolicy.WORST_FIT.value: WorstFitAllocation,
    }

    if policy not in policies:
        raise ValueError(f"Unknown placement policy: {policy}")

    return policies[policy]()
