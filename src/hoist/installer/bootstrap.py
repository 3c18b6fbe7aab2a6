# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/installer/bootstrap.py

from __future__ import annotations

import logging
from typing import Optional, Sequence

from hoist.api.client import PlatformClient
from hoist.api.targets import TargetStore
from hoist.installer.errors import BootstrapError
from hoist.observers.dispatcher import EventBus
from hoist.observers.events import ApiBootstrapped, new_ctx

log = logging.getLogger("hoist")


def api_target(manager_address: str, port: int) -> str:
    return f"http://{manager_address}:{port}"


def bootstrap(
    client: PlatformClient,
    *,
    admin_login: str,
    admin_password: str,
    target_name: str,
    worker_addresses: Sequence[str],
    targets: TargetStore,
    bus: Optional[EventBus] = None,
    run_ctx: Optional[dict] = None,
) -> str:
    """
    Initialize the freshly installed control API and record it as a target.

    One remote call, no retry. Returns the admin token handed back by the API.
    """
    try:
        token = client.bootstrap(
            login=admin_login,
            password=admin_password,
            target_name=target_name,
            nodes=worker_addresses,
        )
        targets.add(target_name, client.target, token)
    except Exception as exc:
        raise BootstrapError(f"failed to bootstrap {client.target}: {exc}") from exc

    log.info("API bootstrapped at %s as target %s", client.target, target_name)
    if bus:
        ctx = run_ctx or new_ctx(platform=target_name)
        bus.emit(
            ApiBootstrapped(
                target=client.target,
                target_name=target_name,
                nodes=list(worker_addresses),
                **ctx,
            )
        )
    return token
