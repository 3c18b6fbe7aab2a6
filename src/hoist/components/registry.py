# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/components/registry.py

from __future__ import annotations

from dataclasses import dataclass

from hoist.cluster.models import PortMapping, ServiceSpec
from hoist.components.component import PlatformComponent


@dataclass
class RegistryComponent(PlatformComponent):
    """Docker registry holding application images built by the platform."""

    name: str = "Docker Registry"
    service_name: str = "registry"

    def service_spec(self, cluster, settings) -> ServiceSpec:
        env = {"REGISTRY_STORAGE_DELETE_ENABLED": "true"}
        return ServiceSpec(
            image=settings.images.registry,
            ports=[PortMapping(published=settings.registry_port, target=5000)],
            env=env,
            constraints=["node.role==manager"],
        )
