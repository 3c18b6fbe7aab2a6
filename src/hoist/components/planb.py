# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/components/planb.py

from __future__ import annotations

from dataclasses import dataclass

from hoist.cluster.models import PortMapping, ServiceSpec
from hoist.components.component import PlatformComponent

PLANB_LISTEN_PORT = 8080


@dataclass
class PlanBComponent(PlatformComponent):
    """HTTP router for application traffic; reads its routes from redis."""

    name: str = "PlanB"
    service_name: str = "planb"

    def service_spec(self, cluster, settings) -> ServiceSpec:
        return ServiceSpec(
            image=settings.images.planb,
            mode="global",
            ports=[PortMapping(published=settings.router_port, target=PLANB_LISTEN_PORT)],
            args=[
                "--listen", f":{PLANB_LISTEN_PORT}",
                "--read-redis-host", "redis",
                "--write-redis-host", "redis",
            ],
        )
