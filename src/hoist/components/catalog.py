# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/components/catalog.py

from __future__ import annotations

from typing import Tuple

from hoist.components.api import PlatformAPIComponent
from hoist.components.component import PlatformComponent
from hoist.components.mongodb import MongoDBComponent
from hoist.components.planb import PlanBComponent
from hoist.components.redis import RedisComponent
from hoist.components.registry import RegistryComponent


def build_catalog(*, wait_for_api: bool = True) -> Tuple[PlatformComponent, ...]:
    """
    The platform components in installation order.

    Order matters: the router needs redis and the API needs every service
    before it.
    """
    return (
        MongoDBComponent(),
        RedisComponent(),
        PlanBComponent(),
        RegistryComponent(),
        PlatformAPIComponent(wait_ready=wait_for_api),
    )
