# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/components/mongodb.py

from __future__ import annotations

from dataclasses import dataclass

from hoist.cluster.models import ServiceSpec
from hoist.components.component import PlatformComponent


@dataclass
class MongoDBComponent(PlatformComponent):
    name: str = "MongoDB"
    service_name: str = "mongo"

    def service_spec(self, cluster, settings) -> ServiceSpec:
        # data lives on the manager's local volume
        return ServiceSpec(
            image=settings.images.mongo,
            constraints=["node.role==manager"],
        )
