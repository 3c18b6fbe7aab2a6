# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Callable, List, Protocol, Sequence

from hoist.cluster.models import ClusterMember, ComponentStatus, ServiceSpec
from hoist.machine.models import Machine


class Cluster(Protocol):
    def cluster_info(self) -> List[ClusterMember]: ...

    def manager(self) -> ClusterMember: ...

    def run_component(self, name: str, spec: ServiceSpec) -> None: ...

    def component_status(self, name: str) -> ComponentStatus: ...

    def close(self) -> None: ...


# (machines, manager candidates) -> formed cluster
ClusterFactory = Callable[[Sequence[Machine], Sequence[Machine]], Cluster]
