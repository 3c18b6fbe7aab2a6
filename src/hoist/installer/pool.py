# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/installer/pool.py

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from hoist.config.models import InstallationPlan
from hoist.installer.errors import ProvisionError
from hoist.machine.interface import Provisioner
from hoist.machine.models import Machine
from hoist.observers.dispatcher import EventBus
from hoist.observers.events import (
    AppsPoolSelected,
    MachineProvisioned,
    MachineProvisionFailed,
    new_ctx,
)

log = logging.getLogger("hoist")


def options_for_index(options: Mapping[str, Sequence[Any]], index: int) -> Dict[str, Any]:
    """Pick the value at `index mod len(values)` for every option."""
    return {key: values[index % len(values)] for key, values in options.items()}


def provision_machines(
    provisioner: Provisioner,
    count: int,
    options: Mapping[str, Sequence[Any]],
    *,
    bus: Optional[EventBus] = None,
    run_ctx: Optional[dict] = None,
    pool: str = "core",
) -> List[Machine]:
    """
    Provision `count` machines one at a time, in index order.

    The first failure aborts with ProvisionError. Machines created before it
    are left running; nothing here deprovisions.
    """
    ctx = run_ctx or new_ctx(platform="hoist")
    machines: List[Machine] = []

    for i in range(count):
        opts = options_for_index(options, i)
        log.debug("Provisioning %s machine #%d with %s", pool, i, opts)
        try:
            machine = provisioner.provision_machine(opts)
        except Exception as exc:
            if bus:
                bus.emit(MachineProvisionFailed(pool=pool, index=i, error=str(exc), **ctx))
            raise ProvisionError(f"failed to provision {pool} machine #{i}: {exc}") from exc

        log.info("Provisioned %s machine %s (%s)", pool, machine.name, machine.address)
        if bus:
            bus.emit(
                MachineProvisioned(
                    pool=pool,
                    index=i,
                    name=machine.name,
                    address=machine.address,
                    **ctx,
                )
            )
        machines.append(machine)

    return machines


def select_apps_pool(
    plan: InstallationPlan,
    provisioner: Provisioner,
    core_machines: Sequence[Machine],
    *,
    bus: Optional[EventBus] = None,
    run_ctx: Optional[dict] = None,
) -> List[Machine]:
    """
    Decide which machines run application workloads.

    - dedicated: `apps_hosts` fresh machines, never a core machine
    - more apps hosts than core machines: the fresh deficit, followed by
      every core machine in its original order
    - otherwise: the first `apps_hosts` core machines
    """
    core = list(core_machines)

    if plan.dedicated_apps_hosts:
        mode = "dedicated"
        fresh = provision_machines(
            provisioner, plan.apps_hosts, plan.apps_driver_options,
            bus=bus, run_ctx=run_ctx, pool="apps",
        )
        reused: List[Machine] = []
    elif plan.apps_hosts > len(core):
        mode = "mixed"
        fresh = provision_machines(
            provisioner, plan.apps_hosts - len(core), plan.apps_driver_options,
            bus=bus, run_ctx=run_ctx, pool="apps",
        )
        reused = core
    else:
        mode = "reused"
        fresh = []
        reused = core[: plan.apps_hosts]

    log.info("Apps pool (%s): %d fresh, %d reused", mode, len(fresh), len(reused))
    if bus:
        ctx = run_ctx or new_ctx(platform=plan.name)
        bus.emit(
            AppsPoolSelected(
                mode=mode,
                fresh=[m.name for m in fresh],
                reused=[m.name for m in reused],
                **ctx,
            )
        )
    return fresh + reused
