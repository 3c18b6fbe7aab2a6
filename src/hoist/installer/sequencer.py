# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/installer/sequencer.py

from __future__ import annotations

import logging
import time
from typing import Optional, Sequence

from hoist.cluster.interface import Cluster
from hoist.components.component import PlatformComponent
from hoist.config.models import ComponentsSettings
from hoist.installer.errors import ComponentInstallError
from hoist.observers.dispatcher import EventBus
from hoist.observers.events import (
    ComponentInstalled,
    ComponentInstallFailed,
    ComponentInstallStarted,
    new_ctx,
)

log = logging.getLogger("hoist")


def install_all(
    catalog: Sequence[PlatformComponent],
    cluster: Cluster,
    settings: ComponentsSettings,
    *,
    bus: Optional[EventBus] = None,
    run_ctx: Optional[dict] = None,
) -> None:
    """
    Install every component in declared order, stopping at the first failure.

    Components installed before a failure are left in place.
    """
    ctx = run_ctx or new_ctx(platform=settings.target_name)

    for component in catalog:
        log.info("Installing %s", component.name)
        if bus:
            bus.emit(ComponentInstallStarted(name=component.name, **ctx))

        started = time.monotonic()
        try:
            component.install(cluster, settings)
        except Exception as exc:
            if bus:
                bus.emit(ComponentInstallFailed(name=component.name, error=str(exc), **ctx))
            raise ComponentInstallError(component.name, exc) from exc

        duration_ms = int((time.monotonic() - started) * 1000)
        log.info("%s installed in %dms", component.name, duration_ms)
        if bus:
            bus.emit(ComponentInstalled(name=component.name, duration_ms=duration_ms, **ctx))
