# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/machine/docker_machine.py

from __future__ import annotations

import json
import logging
import re
import shutil
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from hoist.config.models import InstallationPlan
from hoist.machine.models import Machine, MachineState
from hoist.utils.paths import machines_dir

log = logging.getLogger("hoist")

# first flag on each line of `docker-machine create --help`
_HELP_FLAG_RE = re.compile(r"^\s*--([a-z0-9][a-z0-9-]*)", re.M)


class DockerMachineError(RuntimeError):
    pass


def serialize_option(key: str, value: Any) -> List[str]:
    """
    Turn one driver option into docker-machine CLI arguments.

    True -> bare flag, False/None -> nothing, list -> repeated flag,
    scalar -> flag + value. Anything else is rejected here, at the point
    the value is actually used.
    """
    flag = key if key.startswith("-") else f"--{key}"

    if value is None or value is False:
        return []
    if value is True:
        return [flag]
    if isinstance(value, (list, tuple)):
        args: List[str] = []
        for item in value:
            if isinstance(item, (dict, list, tuple)):
                raise DockerMachineError(f"unsupported value for driver option {key}: {value!r}")
            args += [flag, str(item)]
        return args
    if isinstance(value, (str, int, float)):
        return [flag, str(value)]

    raise DockerMachineError(f"unsupported value for driver option {key}: {value!r}")


class DockerMachineProvisioner:
    """
    Provisioner backed by the docker-machine CLI.

    Every installation gets its own storage path so `delete_all` only
    touches the machines created for it.
    """

    def __init__(
        self,
        *,
        name: str,
        driver_name: str,
        driver_options: Optional[Dict[str, Any]] = None,
        ca_path: str = "",
        docker_hub_mirror: str = "",
        storage_path: Optional[Path] = None,
        binary: str = "docker-machine",
    ):
        self.name = name
        self.driver_name = driver_name
        self.driver_options = dict(driver_options or {})
        self.ca_path = ca_path
        self.docker_hub_mirror = docker_hub_mirror
        self.storage_path = Path(storage_path) if storage_path else machines_dir(name)
        self.binary = binary
        self._closed = False
        self._flags: Optional[Set[str]] = None

        self.storage_path.mkdir(parents=True, exist_ok=True)
        self._prepare_certs()

    @classmethod
    def from_plan(cls, plan: InstallationPlan, **kwargs) -> "DockerMachineProvisioner":
        return cls(
            name=plan.name,
            driver_name=plan.driver_name,
            driver_options=plan.driver_options,
            ca_path=plan.ca_path,
            docker_hub_mirror=plan.docker_hub_mirror,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    @property
    def certs_dir(self) -> Path:
        return self.storage_path / "certs"

    def _prepare_certs(self) -> None:
        """
        Copy a user supplied CA into the store so docker-machine signs
        every host certificate with it instead of generating its own.
        """
        if not self.ca_path:
            return
        src = Path(self.ca_path).expanduser()
        self.certs_dir.mkdir(parents=True, exist_ok=True)
        for filename in ("ca.pem", "ca-key.pem"):
            source = src / filename
            if not source.is_file():
                raise DockerMachineError(f"CA file not found: {source}")
            shutil.copyfile(source, self.certs_dir / filename)

    def _run(self, args: List[str]) -> subprocess.CompletedProcess:
        cmd = [self.binary, "--storage-path", str(self.storage_path), *args]
        # option values may carry credentials; only the verb is logged
        log.debug("docker-machine %s", args[0])
        cp = subprocess.run(cmd, capture_output=True, text=True, check=False)
        if cp.returncode != 0:
            raise DockerMachineError(
                f"docker-machine {args[0]} failed ({cp.returncode}): {cp.stderr.strip()}"
            )
        return cp

    def _existing(self) -> List[str]:
        cp = self._run(["ls", "-q"])
        return [line.strip() for line in cp.stdout.splitlines() if line.strip()]

    def _next_name(self) -> str:
        existing = set(self._existing())
        index = 1
        while f"{self.name}-{index}" in existing:
            index += 1
        return f"{self.name}-{index}"

    def _driver_flags(self) -> Set[str]:
        """Flags `create` accepts for this driver, read once from its help output."""
        if self._flags is None:
            cp = self._run(["create", "--driver", self.driver_name, "--help"])
            self._flags = set(_HELP_FLAG_RE.findall(f"{cp.stdout}\n{cp.stderr}"))
        return self._flags

    def _create_args(self, machine_name: str, options: Dict[str, Any]) -> List[str]:
        args = ["create", "--driver", self.driver_name]
        if self.docker_hub_mirror:
            args += ["--engine-registry-mirror", self.docker_hub_mirror]
        merged = {**self.driver_options, **options}
        declared = self._driver_flags()
        dropped = []
        for key, value in merged.items():
            # docker-machine rejects flags the driver does not declare
            if key.lstrip("-") not in declared:
                dropped.append(key)
                continue
            args += serialize_option(key, value)
        if dropped:
            log.debug("driver %s ignores options: %s", self.driver_name, ", ".join(sorted(dropped)))
        args.append(machine_name)
        return args

    def _inspect(self, machine_name: str) -> Machine:
        cp = self._run(["inspect", machine_name])
        try:
            data = json.loads(cp.stdout or "{}")
        except json.JSONDecodeError as exc:
            raise DockerMachineError(f"invalid inspect output for {machine_name}: {exc}") from exc

        driver = data.get("Driver") or {}
        address = driver.get("IPAddress")
        if not address:
            address = self._run(["ip", machine_name]).stdout.strip()

        auth = (data.get("HostOptions") or {}).get("AuthOptions") or {}
        ssh_key = driver.get("SSHKeyPath") or str(
            self.storage_path / "machines" / machine_name / "id_rsa"
        )

        return Machine(
            name=machine_name,
            driver_name=data.get("DriverName", self.driver_name),
            address=address,
            private_address=driver.get("PrivateIPAddress") or address,
            ssh_key_path=ssh_key,
            ca_path=auth.get("CertDir") or str(self.certs_dir),
            driver=driver,
            ssh_user=driver.get("SSHUser") or "docker",
            ssh_port=int(driver.get("SSHPort") or 22),
            state=MachineState.RUNNING,
        )

    # ------------------------------------------------------------------
    # Provisioner
    # ------------------------------------------------------------------

    def provision_machine(self, options: Dict[str, Any]) -> Machine:
        if self._closed:
            raise DockerMachineError("provisioner is closed")

        machine_name = self._next_name()
        log.info("Creating machine %s (driver=%s)", machine_name, self.driver_name)
        self._run(self._create_args(machine_name, options))
        machine = self._inspect(machine_name)
        log.info("Machine %s is running at %s", machine.name, machine.address)
        return machine

    def delete_all(self) -> None:
        names = self._existing()
        if not names:
            log.info("No machines to remove under %s", self.storage_path)
            return
        log.info("Removing machines: %s", ", ".join(names))
        self._run(["rm", "-y", *names])

    def close(self) -> None:
        self._closed = True
