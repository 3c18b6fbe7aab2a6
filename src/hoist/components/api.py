# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/components/api.py

from __future__ import annotations

import logging
from dataclasses import dataclass

import requests

from hoist.cluster.interface import Cluster
from hoist.cluster.models import PortMapping, ServiceSpec
from hoist.components.component import PlatformComponent
from hoist.components.rendering import render_config
from hoist.config.models import ComponentsSettings
from hoist.utils.retry import retry

log = logging.getLogger("hoist")

API_CONFIG_PATH = "/etc/tsuru/tsuru.conf"
API_LISTEN_PORT = 8080


class ApiNotReady(RuntimeError):
    pass


@dataclass
class PlatformAPIComponent(PlatformComponent):
    """
    The platform control API.

    Its configuration file is rendered from `api.conf.j2` and shipped as a
    swarm config. Installation finishes only once `/healthcheck` answers.
    """

    name: str = "Platform API"
    service_name: str = "api"

    wait_ready: bool = True
    wait_retries: int = 60
    wait_delay: float = 5.0

    def config_text(self, cluster: Cluster, settings: ComponentsSettings) -> str:
        return render_config(
            "api.conf.j2",
            listen_port=API_LISTEN_PORT,
            api_port=settings.api_port,
            manager_address=cluster.manager().address,
            registry_port=settings.registry_port,
            database_name=settings.target_name,
            target_name=settings.target_name,
            docker_hub_mirror=settings.docker_hub_mirror,
        )

    def service_spec(self, cluster: Cluster, settings: ComponentsSettings) -> ServiceSpec:
        return ServiceSpec(
            image=settings.images.api,
            ports=[PortMapping(published=settings.api_port, target=API_LISTEN_PORT)],
            configs={API_CONFIG_PATH: self.config_text(cluster, settings)},
            env={
                "MONGODB_ADDR": "mongo",
                "MONGODB_PORT": "27017",
                "REDIS_ADDR": "redis",
                "REDIS_PORT": "6379",
            },
            constraints=["node.role==manager"],
        )

    def healthcheck_url(self, cluster: Cluster, settings: ComponentsSettings) -> str:
        return f"http://{cluster.manager().address}:{settings.api_port}/healthcheck"

    def post_install(self, cluster: Cluster, settings: ComponentsSettings) -> None:
        if not self.wait_ready:
            return
        url = self.healthcheck_url(cluster, settings)
        log.info("Waiting for %s", url)

        @retry(
            retries=self.wait_retries,
            delay=self.wait_delay,
            retry_on=(requests.RequestException, ApiNotReady),
            on_retry=lambda attempt, exc: log.debug("healthcheck attempt %d: %s", attempt, exc),
        )
        def _probe() -> None:
            r = requests.get(url, timeout=5)
            if r.status_code != 200:
                raise ApiNotReady(f"healthcheck returned {r.status_code}")

        _probe()
