# src/hoist/observers/logger.py
from __future__ import annotations

import logging

from .events import (
    BaseEvent,
    ComponentInstallFailed,
    FixupFailed,
    InstallSummary,
    MachineProvisionFailed,
    MaterialReadFailed,
)

_WARNING_EVENTS = (MachineProvisionFailed, ComponentInstallFailed, FixupFailed, MaterialReadFailed)


def _level(event: BaseEvent) -> int:
    if isinstance(event, _WARNING_EVENTS):
        return logging.WARNING
    if isinstance(event, InstallSummary) and event.status != "OK":
        return logging.ERROR
    return logging.DEBUG


class LoggerObserver:
    """Mirrors every event into the run log; failures are raised above DEBUG."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def notify(self, event: BaseEvent) -> None:
        fields = ", ".join(f"{k}={v}" for k, v in event.dict().items() if k not in ("ts", "run_id"))
        self.logger.log(_level(event), "[EVENT] %s: %s", type(event).__name__, fields)
