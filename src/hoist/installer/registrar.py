# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/installer/registrar.py

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from hoist.api.client import PlatformClient
from hoist.installer.errors import RegistrationError
from hoist.machine.models import Machine
from hoist.observers.dispatcher import EventBus
from hoist.observers.events import HostRegistered, MaterialReadFailed, new_ctx
from hoist.utils.serialize import to_jsonable

log = logging.getLogger("hoist")


@dataclass(frozen=True)
class ReadResult:
    """File content, or the reason it could not be read."""

    value: Optional[str]
    warning: Optional[str] = None

    @property
    def text(self) -> str:
        return self.value or ""


@dataclass
class RegistrationReport:
    registered: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def read_material(path: Union[str, Path, None]) -> ReadResult:
    if not path:
        return ReadResult(None, "no path configured")
    try:
        return ReadResult(Path(path).read_text())
    except OSError as exc:
        return ReadResult(None, f"{path}: {exc}")


def unique_by_name(machines: Sequence[Machine]) -> List[Machine]:
    """Drop duplicate names; a later machine replaces an earlier one in place."""
    by_name: Dict[str, Machine] = {}
    for m in machines:
        by_name[m.name] = m
    return list(by_name.values())


def host_fields(machine: Machine, key: ReadResult, cert: ReadResult, ca_key: ReadResult) -> Dict[str, str]:
    return {
        "driver": json.dumps(to_jsonable(machine.driver), default=str, sort_keys=True),
        "name": machine.name,
        "driverName": machine.driver_name,
        "sshPrivateKey": key.text,
        "caCert": cert.text,
        "caPrivateKey": ca_key.text,
    }


def register_all(
    machines: Sequence[Machine],
    client: PlatformClient,
    *,
    bus: Optional[EventBus] = None,
    run_ctx: Optional[dict] = None,
) -> RegistrationReport:
    """
    Register each distinct machine with the platform's host registry.

    Unreadable key material is registered as empty and reported as a
    warning. A rejected registration aborts the remaining ones.
    """
    ctx = run_ctx or new_ctx(platform="hoist")
    report = RegistrationReport()

    for machine in unique_by_name(machines):
        paths = (machine.ssh_key_path, machine.ca_cert_path, machine.ca_key_path)
        reads = [read_material(p) for p in paths]
        key, cert, ca_key = reads
        for path, result in zip(paths, reads):
            if result.warning:
                log.warning("[%s] unable to read %s", machine.name, result.warning)
                report.warnings.append(f"{machine.name}: {result.warning}")
                if bus:
                    bus.emit(MaterialReadFailed(host=machine.name, path=str(path or ""), error=result.warning, **ctx))

        fields = host_fields(machine, key, cert, ca_key)
        try:
            client.register_host(fields)
        except Exception as exc:
            raise RegistrationError(f"failed to register host {machine.name}: {exc}") from exc

        log.info("Registered host %s", machine.name)
        report.registered.append(machine.name)
        if bus:
            bus.emit(HostRegistered(name=machine.name, driver_name=machine.driver_name, **ctx))

    return report
