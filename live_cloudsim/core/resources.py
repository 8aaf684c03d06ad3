"""Cloud resource models: hosts, VMs, and the fixed datacenter topology."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from loguru import logger

from .scaling import ScaleFactors


class ResourceState(Enum):
    """Resource state enumeration."""
    AVAILABLE = "available"
    ALLOCATED = "allocated"
    FAILED = "failed"


class HostClass(Enum):
    """Physical host classes of the datacenter."""
    GENERAL_COMPUTE = "general-compute"
    GENERAL_COMPUTE_SMALLER = "general-compute-smaller"
    HIGH_BANDWIDTH = "high-bandwidth"


@dataclass(frozen=True)
class HostSpec:
    """Host specifications."""
    host_class: HostClass
    cores: int
    mips_per_core: int
    ram_mb: int
    storage_mb: int
    bandwidth: int


@dataclass(frozen=True)
class VmSpec:
    """VM specifications; mips is the rating of each core."""
    role: str
    cores: int
    ram_mb: int
    bandwidth: int
    mips: int
    disk_mb: int


@dataclass(frozen=True)
class HostTemplate:
    """Base host capacity before datacenter scaling."""
    host_class: HostClass
    base_cores: int
    min_cores: int
    mips_per_core: int
    ram_mb: int
    bandwidth: int
    storage_mb: int
    scaled: bool = True


@dataclass(frozen=True)
class VmRole:
    """A VM role and its base size."""
    name: str
    base_cores: int
    base_ram_mb: int


HOST_TEMPLATES: Tuple[HostTemplate, ...] = (
    HostTemplate(HostClass.GENERAL_COMPUTE, 32, 16, 2800, 65536, 25000, 500000),
    HostTemplate(HostClass.GENERAL_COMPUTE_SMALLER, 20, 12, 2500, 32768, 20000, 300000),
    # High bandwidth for CDN-style static serving
    HostTemplate(HostClass.HIGH_BANDWIDTH, 8, 8, 2000, 16384, 50000, 1000000, scaled=False),
)

VM_ROLES: Tuple[VmRole, ...] = (
    VmRole("Next.js Application Server", 4, 4096),
    VmRole("API/Backend Server", 2, 2048),
    VmRole("Static Content Server", 2, 2048),
    VmRole("Database Server", 4, 4096),
    VmRole("Build/CI Server", 6, 8192),
)

MIN_VM_CORES = 1
MIN_VM_RAM_MB = 1024


class Host:
    """Physical host in the simulated datacenter."""

    def __init__(self, host_id: str, specs: HostSpec):
        self.host_id = host_id
        self.specs = specs
        self.state = ResourceState.AVAILABLE

        # Resource tracking
        self.allocated_cores = 0
        self.allocated_ram_mb = 0
        self.allocated_bandwidth = 0
        self.allocated_storage_mb = 0

        self.vms: Dict[str, "VirtualMachine"] = {}

        logger.info(f"Host {host_id} created with {specs.cores} cores, "
                    f"{specs.ram_mb} MB RAM ({specs.host_class.value})")

    @property
    def free_cores(self) -> int:
        return self.specs.cores - self.allocated_cores

    def can_accommodate(self, vm_specs: VmSpec) -> bool:
        """Check if host can accommodate the VM."""
        return (
            self.state == ResourceState.AVAILABLE and
            self.free_cores >= vm_specs.cores and
            self.specs.ram_mb - self.allocated_ram_mb >= vm_specs.ram_mb and
            self.specs.bandwidth - self.allocated_bandwidth >= vm_specs.bandwidth and
            self.specs.storage_mb - self.allocated_storage_mb >= vm_specs.disk_mb
        )

    def allocate(self, vm: "VirtualMachine") -> bool:
        """Allocate host resources to a VM."""
        if not self.can_accommodate(vm.specs):
            return False

        self.allocated_cores += vm.specs.cores
        self.allocated_ram_mb += vm.specs.ram_mb
        self.allocated_bandwidth += vm.specs.bandwidth
        self.allocated_storage_mb += vm.specs.disk_mb
        self.vms[vm.vm_id] = vm

        logger.debug(f"Allocated {vm.specs.cores} cores, {vm.specs.ram_mb} MB "
                     f"on host {self.host_id} for VM {vm.vm_id}")
        return True

    def get_utilization(self) -> Dict[str, float]:
        """Fraction of cores and RAM allocated to VMs."""
        return {
            "cpu_utilization": self.allocated_cores / self.specs.cores if self.specs.cores else 0.0,
            "memory_utilization": self.allocated_ram_mb / self.specs.ram_mb if self.specs.ram_mb else 0.0,
        }


class VirtualMachine:
    """Virtual machine placed on a host."""

    def __init__(self, vm_id: str, specs: VmSpec):
        self.vm_id = vm_id
        self.specs = specs
        self.host: Optional[Host] = None
        self.state = ResourceState.AVAILABLE

        logger.info(f"VM {vm_id} ({specs.role}): {specs.cores} cores, "
                    f"{specs.ram_mb} MB RAM, {specs.mips} MIPS")

    @property
    def is_placed(self) -> bool:
        return self.host is not None and self.state == ResourceState.ALLOCATED

    def place_on(self, host: Host) -> bool:
        """Start the VM on a host."""
        if host.allocate(self):
            self.host = host
            self.state = ResourceState.ALLOCATED
            logger.info(f"VM {self.vm_id} started on host {host.host_id}")
            return True
        return False

    def fail(self, reason: str) -> None:
        self.state = ResourceState.FAILED
        logger.error(f"Failed to start VM {self.vm_id} - {reason}")


@dataclass
class ResourceModel:
    """Hosts and VMs built for one simulation run."""
    hosts: List[HostSpec]
    vms: List[VmSpec]

    @property
    def total_host_cores(self) -> int:
        return sum(h.cores for h in self.hosts)

    @property
    def total_host_ram_mb(self) -> int:
        return sum(h.ram_mb for h in self.hosts)


class ResourceModelBuilder:
    """Builds the three host classes and the five VM roles from scale factors."""

    def __init__(
        self,
        host_templates: Tuple[HostTemplate, ...] = HOST_TEMPLATES,
        vm_roles: Tuple[VmRole, ...] = VM_ROLES,
    ):
        self.host_templates = host_templates
        self.vm_roles = vm_roles

    def build(self, factors: ScaleFactors) -> ResourceModel:
        hosts = self.build_hosts(factors)
        vms = self.build_vms(factors)
        model = ResourceModel(hosts=hosts, vms=vms)

        logger.info(f"Created datacenter (scale: {factors.datacenter:.2f}) - "
                    f"total capacity: {model.total_host_cores} cores, "
                    f"{model.total_host_ram_mb} MB RAM")
        return model

    def build_hosts(self, factors: ScaleFactors) -> List[HostSpec]:
        hosts = []
        for template in self.host_templates:
            cores = template.base_cores
            if template.scaled:
                cores = max(template.min_cores, int(template.base_cores * factors.datacenter))
            hosts.append(HostSpec(
                host_class=template.host_class,
                cores=cores,
                mips_per_core=template.mips_per_core,
                ram_mb=template.ram_mb,
                storage_mb=template.storage_mb,
                bandwidth=template.bandwidth,
            ))
        return hosts

    def build_vms(self, factors: ScaleFactors) -> List[VmSpec]:
        vms = []
        for i, role in enumerate(self.vm_roles):
            vms.append(VmSpec(
                role=role.name,
                cores=max(MIN_VM_CORES, int(role.base_cores * factors.cpu)),
                ram_mb=max(MIN_VM_RAM_MB, int(role.base_ram_mb * factors.response * factors.load)),
                bandwidth=1200 + i * 400,
                mips=int((2200 + i * 600) * factors.mips),
                disk_mb=12000 + i * 8000,
            ))
        return vms
