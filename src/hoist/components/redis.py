# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/components/redis.py

from __future__ import annotations

from dataclasses import dataclass

from hoist.cluster.models import ServiceSpec
from hoist.components.component import PlatformComponent


@dataclass
class RedisComponent(PlatformComponent):
    name: str = "Redis"
    service_name: str = "redis"

    def service_spec(self, cluster, settings) -> ServiceSpec:
        return ServiceSpec(
            image=settings.images.redis,
            constraints=["node.role==manager"],
        )
