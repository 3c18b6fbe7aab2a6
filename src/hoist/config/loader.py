# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/config/loader.py

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from hoist.config.models import (
    DEFAULT_API_PORT,
    ComponentsSettings,
    DriverOptionLists,
    InstallationPlan,
)
from hoist.installer.errors import ConfigError

log = logging.getLogger("hoist")

_MISSING = object()

# document path -> InstallationPlan field
_SCALAR_KEYS = {
    "name": "name",
    "docker-hub-mirror": "docker_hub_mirror",
    "ca-path": "ca_path",
    "driver:name": "driver_name",
    "hosts:core:size": "core_hosts",
    "hosts:apps:size": "apps_hosts",
    "hosts:apps:dedicated": "dedicated_apps_hosts",
}

_POOL_OPTION_KEYS = {
    "hosts:core:driver:options": "core_driver_options",
    "hosts:apps:driver:options": "apps_driver_options",
}

_COMPONENT_KEYS = {
    "components:target-name": "target_name",
    "components:admin-email": "admin_email",
    "components:admin-password": "admin_password",
}


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    try:
        raw = path.read_text()
    except OSError as exc:
        raise ConfigError(f"failed to read {path}: {exc}") from exc

    try:
        data = yaml.safe_load(os.path.expandvars(raw))
    except yaml.YAMLError as exc:
        raise ConfigError(f"malformed configuration {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"configuration {path} must be a mapping, got {type(data).__name__}")
    return data


def _lookup(doc: dict, path: str) -> Any:
    """Walk a colon separated path ("hosts:core:size") through nested mappings."""
    node: Any = doc
    for part in path.split(":"):
        if not isinstance(node, dict) or part not in node:
            return _MISSING
        node = node[part]
    return node


def _string_keyed(block: Any, path: str) -> Dict[str, Any]:
    if not isinstance(block, dict):
        raise ConfigError(f"failed to parse {path}: expected a mapping, got {block!r}")
    return {k: v for k, v in block.items() if isinstance(k, str)}


def parse_driver_options(block: Any, path: str = "driver options") -> DriverOptionLists:
    """
    Normalize a per-pool option block into option -> list of candidate values.

    A scalar becomes a single element list; a list is kept as is.
    """
    parsed: DriverOptionLists = {}
    for key, value in _string_keyed(block, path).items():
        values = list(value) if isinstance(value, list) else [value]
        if not values:
            raise ConfigError(f"failed to parse {path}: option '{key}' has no values")
        parsed[key] = values
    return parsed


def _overrides_from(doc: dict) -> tuple[dict, dict]:
    overrides: dict = {}
    components: dict = {}

    for path, field in _SCALAR_KEYS.items():
        value = _lookup(doc, path)
        if value is not _MISSING and value is not None:
            overrides[field] = value

    options = _lookup(doc, "driver:options")
    if options is not _MISSING and options is not None:
        overrides["driver_options"] = _string_keyed(options, "driver:options")

    for path, field in _POOL_OPTION_KEYS.items():
        block = _lookup(doc, path)
        if block is not _MISSING and block is not None:
            overrides[field] = parse_driver_options(block, path)

    for path, field in _COMPONENT_KEYS.items():
        value = _lookup(doc, path)
        if value is not _MISSING and value is not None:
            components[field] = value

    return overrides, components


def resolve(path: Optional[str | Path] = None) -> InstallationPlan:
    """
    Resolve the installation plan.

    Without a path the built-in defaults are used (one local virtualbox host
    shared by core and apps). With a path, recognized keys of the YAML
    document overlay the defaults one by one; absent keys keep their default
    and unknown keys are ignored.

    The core pool always opens the platform API port through the driver's
    `<driver>-open-port` option, whatever the document says.
    """
    overrides: dict = {}
    components: dict = {}

    if path:
        path = Path(path)
        log.debug("Loading installation config from %s", path)
        overrides, components = _overrides_from(_load_yaml(path))

    defaults = InstallationPlan()
    name = overrides.get("name", defaults.name)
    driver_name = overrides.get("driver_name", defaults.driver_name)

    components.setdefault("target_name", name)
    components["docker_hub_mirror"] = overrides.get("docker_hub_mirror", defaults.docker_hub_mirror)

    core_options = dict(overrides.get("core_driver_options", {}))
    core_options[f"{driver_name}-open-port"] = [str(DEFAULT_API_PORT)]
    overrides["core_driver_options"] = core_options

    try:
        plan = InstallationPlan(
            **overrides,
            components=ComponentsSettings(**components),
        )
    except (ValidationError, TypeError) as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc

    log.debug(
        "Resolved plan: name=%s driver=%s core=%d apps=%d dedicated=%s",
        plan.name,
        plan.driver_name,
        plan.core_hosts,
        plan.apps_hosts,
        plan.dedicated_apps_hosts,
    )
    return plan


def default_plan() -> InstallationPlan:
    return resolve(None)
