# src/hoist/cluster/memory.py

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from hoist.cluster.models import ClusterMember, ComponentStatus, ServiceSpec
from hoist.machine.models import Machine


class InMemoryCluster:
    """
    Cluster that only records what it is asked to run.

    `fail_on` names services whose `run_component` raises; `manager_count`
    lets tests report a broken topology.
    """

    def __init__(
        self,
        machines: Sequence[Machine],
        manager_machine: Machine,
        *,
        fail_on: Iterable[str] = (),
        manager_count: int = 1,
    ):
        self.machines = list(machines)
        self.manager_machine = manager_machine
        self.fail_on = set(fail_on)
        self.manager_count = manager_count
        self.services: Dict[str, ServiceSpec] = {}
        self.run_order: List[str] = []
        self.closed = False

    @classmethod
    def form(
        cls,
        machines: Sequence[Machine],
        manager_candidates: Sequence[Machine],
        **kwargs,
    ) -> "InMemoryCluster":
        if not machines:
            raise ValueError("cannot form a cluster without machines")
        candidates = list(manager_candidates) or list(machines)
        return cls(machines, candidates[0], **kwargs)

    def cluster_info(self) -> List[ClusterMember]:
        members = []
        managers_left = self.manager_count
        ordered = [self.manager_machine] + [m for m in self.machines if m.name != self.manager_machine.name]
        for machine in ordered:
            is_manager = managers_left > 0
            managers_left -= 1
            members.append(ClusterMember(address=machine.address, state="ready", is_manager=is_manager))
        return members

    def manager(self) -> ClusterMember:
        return ClusterMember(address=self.manager_machine.address, state="ready", is_manager=True)

    def run_component(self, name: str, spec: ServiceSpec) -> None:
        self.run_order.append(name)
        if name in self.fail_on:
            raise RuntimeError(f"simulated failure running {name}")
        self.services[name] = spec

    def component_status(self, name: str) -> ComponentStatus:
        spec: Optional[ServiceSpec] = self.services.get(name)
        if spec is None:
            raise RuntimeError(f"service {name} not found")
        replicas = len(self.machines) if spec.mode == "global" else spec.replicas
        return ComponentStatus(ports=[str(p) for p in spec.ports], replicas=replicas, image=spec.image)

    def close(self) -> None:
        self.closed = True
