# src/hoist/machine/memory.py

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from hoist.machine.models import Machine, MachineState


class InMemoryProvisioner:
    """
    Provisioner that fabricates machines without touching infrastructure.

    Used by `hoist install --dry-run` and by the tests. `fail_at` makes the
    n-th call (0-based, counted over the provisioner's lifetime) raise.
    """

    def __init__(
        self,
        *,
        name: str = "hoist",
        driver_name: str = "memory",
        fail_at: Optional[int] = None,
        state_dir: Optional[Path] = None,
    ):
        self.name = name
        self.driver_name = driver_name
        self.fail_at = fail_at
        self.state_dir = Path(state_dir) if state_dir else Path("/nonexistent/hoist")
        self.calls: List[Dict[str, Any]] = []
        self.machines: List[Machine] = []
        self.deleted = False
        self.closed = False

    def provision_machine(self, options: Dict[str, Any]) -> Machine:
        index = len(self.calls)
        self.calls.append(dict(options))
        if self.fail_at is not None and index == self.fail_at:
            raise RuntimeError(f"simulated failure creating machine #{index}")

        n = len(self.machines) + 1
        name = f"{self.name}-{n}"
        machine = Machine(
            name=name,
            driver_name=self.driver_name,
            address=f"192.168.99.{100 + n}",
            private_address=f"10.0.0.{n}",
            ssh_key_path=str(self.state_dir / "machines" / name / "id_rsa"),
            ca_path=str(self.state_dir / "certs"),
            driver={"MachineName": name, "IPAddress": f"192.168.99.{100 + n}", **options},
            state=MachineState.RUNNING,
        )
        self.machines.append(machine)
        return machine

    def delete_all(self) -> None:
        for machine in self.machines:
            machine.state = MachineState.DELETED
        self.deleted = True

    def close(self) -> None:
        self.closed = True
