# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/installer/fixup.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from hoist.machine.models import Machine
from hoist.observers.dispatcher import EventBus
from hoist.observers.events import FixupFailed, new_ctx
from hoist.utils.ssh import open_ssh
from hoist.utils.ssh_runner import SSHRunner

log = logging.getLogger("hoist")

_PATH_PREFIX = "PATH=$PATH:/usr/sbin/:/usr/local/sbin;"

# docker_gwbridge <-> docker0 isolation rules left behind by the overlay driver
FIXUP_COMMANDS = (
    f"{_PATH_PREFIX} sudo iptables -D DOCKER-ISOLATION -i docker_gwbridge -o docker0 -j DROP",
    f"{_PATH_PREFIX} sudo iptables -D DOCKER-ISOLATION -i docker0 -o docker_gwbridge -j DROP",
)


@dataclass(frozen=True)
class FixupWarning:
    host: str
    command: str
    error: str

    def __str__(self) -> str:
        return f"[{self.host}] {self.command}: {self.error}"


def apply_fixups(
    machines: Sequence[Machine],
    *,
    connect: Callable[[Machine], SSHRunner] = open_ssh,
    bus: Optional[EventBus] = None,
    run_ctx: Optional[dict] = None,
) -> List[FixupWarning]:
    """
    Remove the DOCKER-ISOLATION rules on every machine.

    The rules may already be gone, so failures are collected as warnings
    and never raised.
    """
    ctx = run_ctx or new_ctx(platform="hoist")
    warnings: List[FixupWarning] = []

    def _warn(host: str, command: str, error: str) -> None:
        w = FixupWarning(host=host, command=command, error=error)
        log.warning("fixup failed: %s", w)
        warnings.append(w)
        if bus:
            bus.emit(FixupFailed(host=host, command=command, error=error, **ctx))

    for machine in machines:
        try:
            runner = connect(machine)
        except Exception as exc:
            for cmd in FIXUP_COMMANDS:
                _warn(machine.address, cmd, f"ssh connect failed: {exc}")
            continue

        try:
            for cmd in FIXUP_COMMANDS:
                try:
                    rc, _, err = runner.run(cmd)
                except Exception as exc:
                    _warn(machine.address, cmd, str(exc))
                    continue
                if rc != 0:
                    _warn(machine.address, cmd, err.strip() or f"exit status {rc}")
        finally:
            runner.close()

    return warnings
