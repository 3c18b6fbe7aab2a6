# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/cluster/swarm.py

from __future__ import annotations

import hashlib
import json
import logging
import shlex
from typing import Callable, Dict, List, Optional, Sequence

from hoist.cluster.models import ClusterMember, ComponentStatus, ServiceSpec
from hoist.machine.models import Machine
from hoist.utils.ssh import open_ssh
from hoist.utils.ssh_runner import SSHRunner

log = logging.getLogger("hoist")

SWARM_PORT = 2377


class SwarmError(RuntimeError):
    pass


class SwarmCluster:
    """
    Docker swarm spanning a set of machines, driven over SSH.

    The first manager candidate runs `swarm init`; every other machine joins
    as a worker. Components run as swarm services attached to one overlay
    network so they reach each other by service name.
    """

    def __init__(
        self,
        machines: Sequence[Machine],
        manager_machine: Machine,
        *,
        connect: Callable[[Machine], SSHRunner] = open_ssh,
        network: str = "hoist",
    ):
        self.machines = list(machines)
        self.manager_machine = manager_machine
        self.network = network
        self._connect = connect
        self._runners: Dict[str, SSHRunner] = {}

    @classmethod
    def form(
        cls,
        machines: Sequence[Machine],
        manager_candidates: Sequence[Machine],
        *,
        connect: Callable[[Machine], SSHRunner] = open_ssh,
        network: str = "hoist",
    ) -> "SwarmCluster":
        if not machines:
            raise SwarmError("cannot form a cluster without machines")
        candidates = list(manager_candidates) or list(machines)

        cluster = cls(machines, candidates[0], connect=connect, network=network)
        try:
            cluster._init_swarm()
        except Exception:
            cluster.close()
            raise
        return cluster

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _runner(self, machine: Machine) -> SSHRunner:
        runner = self._runners.get(machine.name)
        if runner is None:
            runner = self._connect(machine)
            self._runners[machine.name] = runner
        return runner

    def _docker(self, machine: Machine, args: str) -> str:
        return self._runner(machine).check(f"sudo docker {args}")

    def _docker_rc(self, machine: Machine, args: str) -> int:
        rc, _, _ = self._runner(machine).run(f"sudo docker {args}")
        return rc

    def _swarm_active(self, machine: Machine) -> bool:
        out = self._docker(machine, "info --format '{{.Swarm.LocalNodeState}}'")
        return out.strip() == "active"

    def _init_swarm(self) -> None:
        manager = self.manager_machine
        if self._swarm_active(manager):
            log.info("Swarm already active on %s", manager.name)
        else:
            log.info("Initializing swarm on %s (%s)", manager.name, manager.private_address)
            self._docker(manager, f"swarm init --advertise-addr {shlex.quote(manager.private_address)}")

        token = self._docker(manager, "swarm join-token -q worker").strip()
        join_addr = f"{manager.private_address}:{SWARM_PORT}"

        for machine in self.machines:
            if machine.name == manager.name:
                continue
            if self._swarm_active(machine):
                log.info("%s already joined the swarm", machine.name)
                continue
            log.info("Joining %s to the swarm", machine.name)
            self._docker(machine, f"swarm join --token {shlex.quote(token)} {shlex.quote(join_addr)}")

        if self._docker_rc(manager, f"network inspect {shlex.quote(self.network)}") != 0:
            self._docker(
                manager,
                f"network create --driver overlay --attachable {shlex.quote(self.network)}",
            )

    def _ensure_config(self, service: str, target: str, content: str) -> str:
        digest = hashlib.sha256(content.encode()).hexdigest()[:10]
        config_name = f"{service}-{digest}"
        manager = self.manager_machine

        if self._docker_rc(manager, f"config inspect {config_name}") != 0:
            remote_tmp = f"/tmp/hoist-{config_name}"
            runner = self._runner(manager)
            runner.put_text(content, remote_tmp)
            self._docker(manager, f"config create {config_name} {remote_tmp}")
            runner.run(f"rm -f {remote_tmp}")

        return f"source={config_name},target={target}"

    def _create_args(self, name: str, spec: ServiceSpec) -> List[str]:
        args = ["service", "create", "--name", name, "--network", self.network]
        if spec.mode == "global":
            args += ["--mode", "global"]
        else:
            args += ["--replicas", str(spec.replicas)]
        for port in spec.ports:
            args += ["--publish", f"{port.published}:{port.target}"]
        for key, value in spec.env.items():
            args += ["--env", f"{key}={value}"]
        for constraint in spec.constraints:
            args += ["--constraint", constraint]
        for target, content in spec.configs.items():
            args += ["--config", self._ensure_config(name, target, content)]
        args.append(spec.image)
        args += spec.args
        return args

    # ------------------------------------------------------------------
    # Cluster
    # ------------------------------------------------------------------

    def cluster_info(self) -> List[ClusterMember]:
        by_host = {m.name: m for m in self.machines}
        ids = self._docker(self.manager_machine, "node ls -q").split()
        if not ids:
            return []
        nodes = json.loads(self._docker(self.manager_machine, "node inspect " + " ".join(ids)))

        members: List[ClusterMember] = []
        for node in nodes:
            hostname = (node.get("Description") or {}).get("Hostname", "")
            status = node.get("Status") or {}
            machine = by_host.get(hostname)
            members.append(
                ClusterMember(
                    address=machine.address if machine else status.get("Addr", ""),
                    state=status.get("State", "unknown"),
                    is_manager=bool((node.get("ManagerStatus") or {}).get("Leader", False)),
                )
            )
        return members

    def manager(self) -> ClusterMember:
        return ClusterMember(
            address=self.manager_machine.address,
            state="ready",
            is_manager=True,
        )

    def run_component(self, name: str, spec: ServiceSpec) -> None:
        if self._docker_rc(self.manager_machine, f"service inspect {shlex.quote(name)}") == 0:
            log.info("Service %s already exists, leaving it untouched", name)
            return
        args = self._create_args(name, spec)
        self._docker(self.manager_machine, " ".join(shlex.quote(a) for a in args))

    def component_status(self, name: str) -> ComponentStatus:
        data = json.loads(self._docker(self.manager_machine, f"service inspect {shlex.quote(name)}"))
        if not data:
            raise SwarmError(f"service {name} not found")
        svc = data[0]

        ports = [
            f"{p.get('PublishedPort')}:{p.get('TargetPort')}"
            for p in (svc.get("Endpoint") or {}).get("Ports") or []
        ]
        spec = svc.get("Spec") or {}
        mode = spec.get("Mode") or {}
        if "Global" in mode:
            replicas = len(self.machines)
        else:
            replicas = int((mode.get("Replicated") or {}).get("Replicas", 0))
        image: Optional[str] = ((spec.get("TaskTemplate") or {}).get("ContainerSpec") or {}).get("Image")

        return ComponentStatus(ports=ports, replicas=replicas, image=image)

    def close(self) -> None:
        for name, runner in list(self._runners.items()):
            try:
                runner.close()
            except Exception as exc:
                log.debug("closing ssh session to %s failed: %s", name, exc)
        self._runners.clear()
