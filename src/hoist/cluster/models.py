# src/hoist/cluster/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class ClusterMember:
    address: str
    state: str
    is_manager: bool


@dataclass(frozen=True)
class PortMapping:
    published: int
    target: int

    def __str__(self) -> str:
        return f"{self.published}:{self.target}"


@dataclass
class ServiceSpec:
    """
    What a component asks the cluster to run.
    """
    image: str
    replicas: int = 1
    ports: List[PortMapping] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)
    args: List[str] = field(default_factory=list)
    # target path inside the container -> file content
    configs: Dict[str, str] = field(default_factory=dict)
    constraints: List[str] = field(default_factory=list)
    mode: str = "replicated"      # "replicated" | "global"


@dataclass(frozen=True)
class ComponentStatus:
    ports: List[str]
    replicas: int
    image: Optional[str] = None
