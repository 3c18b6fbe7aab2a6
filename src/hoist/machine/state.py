# src/hoist/machine/state.py

from __future__ import annotations

import logging
import socket

from hoist.machine.models import MachineState

log = logging.getLogger("hoist")


def probe_state(address: str, port: int = 22, timeout: float = 3.0) -> MachineState:
    """Report a registered host as running when its SSH port accepts connections."""
    if not address:
        return MachineState.UNREACHABLE
    try:
        with socket.create_connection((address, port), timeout=timeout):
            return MachineState.RUNNING
    except OSError as exc:
        log.debug("probe %s:%d failed: %s", address, port, exc)
        return MachineState.UNREACHABLE
