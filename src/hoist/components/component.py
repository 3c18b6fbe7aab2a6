# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from hoist.cluster.interface import Cluster
from hoist.cluster.models import ComponentStatus, ServiceSpec
from hoist.config.models import ComponentsSettings


@dataclass
class PlatformComponent(ABC):
    """
    Declarative definition of a platform component running as a cluster service.
    """

    # Identity
    name: str             # display name
    service_name: str     # name of the service on the cluster

    @abstractmethod
    def service_spec(self, cluster: Cluster, settings: ComponentsSettings) -> ServiceSpec:
        """What to run on the cluster for this component."""

    # ------------------------
    # Hooks
    # ------------------------

    def pre_install(self, cluster: Cluster, settings: ComponentsSettings) -> None:
        """Optional hook. Default: do nothing."""
        pass

    def post_install(self, cluster: Cluster, settings: ComponentsSettings) -> None:
        """Optional hook. Default: do nothing."""
        pass

    # ------------------------
    # Operations
    # ------------------------

    def install(self, cluster: Cluster, settings: ComponentsSettings) -> None:
        self.pre_install(cluster, settings)
        cluster.run_component(self.service_name, self.service_spec(cluster, settings))
        self.post_install(cluster, settings)

    def status(self, cluster: Cluster) -> ComponentStatus:
        return cluster.component_status(self.service_name)
