# src/hoist/machine/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional


class MachineState(str, Enum):
    PROVISIONING = "provisioning"
    RUNNING = "running"
    UNREACHABLE = "unreachable"
    DELETED = "deleted"


@dataclass
class Machine:
    """
    A provisioned host.
    """
    name: str                      # stable machine name (e.g. 'hoist-1')
    driver_name: str               # infrastructure driver that created it
    address: str                   # public / management address
    private_address: str           # address on the private network
    ssh_key_path: str              # path to the SSH private key
    ca_path: str                   # directory holding ca.pem / ca-key.pem
    driver: Dict[str, Any] = field(default_factory=dict)  # opaque driver descriptor
    ssh_user: str = "docker"
    ssh_port: int = 22
    state: MachineState = MachineState.RUNNING

    @property
    def ca_cert_path(self) -> Optional[Path]:
        return Path(self.ca_path) / "ca.pem" if self.ca_path else None

    @property
    def ca_key_path(self) -> Optional[Path]:
        return Path(self.ca_path) / "ca-key.pem" if self.ca_path else None
