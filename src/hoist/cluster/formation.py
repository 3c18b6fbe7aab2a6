# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/cluster/formation.py

from __future__ import annotations

import logging
from typing import Optional, Sequence

from hoist.cluster.interface import Cluster, ClusterFactory
from hoist.installer.errors import ClusterError
from hoist.machine.models import Machine
from hoist.observers.dispatcher import EventBus
from hoist.observers.events import ClusterFormed, new_ctx

log = logging.getLogger("hoist")


def _verify(cluster: Cluster, machines: Sequence[Machine]) -> None:
    members = cluster.cluster_info()

    managers = [m for m in members if m.is_manager]
    if len(managers) != 1:
        raise ClusterError(f"expected exactly one manager, found {len(managers)}")

    addresses = {m.address for m in members}
    missing = [m.name for m in machines if m.address not in addresses]
    if missing:
        raise ClusterError(f"machines missing from cluster: {', '.join(missing)}")


def form(
    machines: Sequence[Machine],
    manager_candidates: Sequence[Machine],
    factory: ClusterFactory,
    *,
    bus: Optional[EventBus] = None,
    run_ctx: Optional[dict] = None,
) -> Cluster:
    """
    Join every machine into one cluster with a single elected manager.

    The clustering itself is done by `factory`; this function only checks
    the resulting topology. Any failure is fatal and is not retried. A
    cluster handle that fails verification is closed before raising.
    """
    try:
        cluster = factory(machines, manager_candidates)
    except Exception as exc:
        raise ClusterError(f"failed to setup swarm cluster: {exc}") from exc

    try:
        _verify(cluster, machines)
    except ClusterError:
        cluster.close()
        raise
    except Exception as exc:
        cluster.close()
        raise ClusterError(f"failed to read cluster membership: {exc}") from exc

    manager = cluster.manager()
    log.info("Cluster formed, manager at %s", manager.address)
    if bus:
        ctx = run_ctx or new_ctx(platform="hoist")
        bus.emit(
            ClusterFormed(
                manager=manager.address,
                members=[m.address for m in machines],
                **ctx,
            )
        )
    return cluster
