# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/config/models.py

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Port the platform API listens on, on the manager host.
DEFAULT_API_PORT = 8080

# Option values per key, picked per machine index (i % len(values)).
DriverOptionLists = Dict[str, List[Any]]


class ComponentImages(BaseModel):
    model_config = ConfigDict(frozen=True)

    mongo: str = "mongo:3.2"
    redis: str = "redis:3.2"
    planb: str = "tsuru/planb:v1"
    registry: str = "registry:2"
    api: str = "tsuru/api:v1"


class ComponentsSettings(BaseModel):
    """Settings handed to every component of the catalog."""

    model_config = ConfigDict(frozen=True)

    target_name: str = "hoist"
    admin_email: str = "admin@example.com"
    admin_password: str = "admin123"
    docker_hub_mirror: str = ""
    network: str = "hoist"
    api_port: int = DEFAULT_API_PORT
    registry_port: int = 5000
    router_port: int = 80
    images: ComponentImages = Field(default_factory=ComponentImages)


class InstallationPlan(BaseModel):
    """
    Fully resolved installation configuration.

    Built once per run by `hoist.config.loader.resolve` and never mutated.
    """

    model_config = ConfigDict(frozen=True)

    # Installation identity
    name: str = "hoist"

    # Infrastructure driver
    driver_name: str = "virtualbox"
    driver_options: Dict[str, Any] = Field(default_factory=dict)
    ca_path: str = ""
    docker_hub_mirror: str = ""

    # Core pool
    core_hosts: int = Field(default=1, ge=1)
    core_driver_options: DriverOptionLists = Field(default_factory=dict)

    # Apps pool
    apps_hosts: int = Field(default=1, ge=0)
    dedicated_apps_hosts: bool = False
    apps_driver_options: DriverOptionLists = Field(default_factory=dict)

    components: ComponentsSettings = Field(default_factory=ComponentsSettings)

    @field_validator("core_driver_options", "apps_driver_options")
    @classmethod
    def _non_empty_lists(cls, value: DriverOptionLists) -> DriverOptionLists:
        for key, values in value.items():
            if not values:
                raise ValueError(f"driver option '{key}' has no values")
        return value
