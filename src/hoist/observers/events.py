# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events in a single install invocation
    platform: str     # installation name

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(platform: str, run_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": run_id or str(uuid.uuid4()),
        "platform": platform,
    }


# ---------------------------------------------------------------------
# Plan
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class PlanResolved(BaseEvent):
    driver: str
    core_hosts: int
    apps_hosts: int
    dedicated: bool


# ---------------------------------------------------------------------
# Machine pools
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class MachineProvisioned(BaseEvent):
    pool: str         # "core" | "apps"
    index: int
    name: str
    address: str

@dataclass(frozen=True)
class MachineProvisionFailed(BaseEvent):
    pool: str
    index: int
    error: str

@dataclass(frozen=True)
class AppsPoolSelected(BaseEvent):
    mode: str         # "dedicated" | "mixed" | "reused"
    fresh: List[str]
    reused: List[str]


# ---------------------------------------------------------------------
# Cluster & components
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ClusterFormed(BaseEvent):
    manager: str
    members: List[str]

@dataclass(frozen=True)
class ComponentInstallStarted(BaseEvent):
    name: str

@dataclass(frozen=True)
class ComponentInstalled(BaseEvent):
    name: str
    duration_ms: int

@dataclass(frozen=True)
class ComponentInstallFailed(BaseEvent):
    name: str
    error: str


# ---------------------------------------------------------------------
# API bootstrap, fixups, registration
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ApiBootstrapped(BaseEvent):
    target: str
    target_name: str
    nodes: List[str]

@dataclass(frozen=True)
class FixupFailed(BaseEvent):
    host: str
    command: str
    error: str

@dataclass(frozen=True)
class MaterialReadFailed(BaseEvent):
    host: str
    path: str
    error: str

@dataclass(frozen=True)
class HostRegistered(BaseEvent):
    name: str
    driver_name: str


# ---------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class InstallSummary(BaseEvent):
    status: str       # "OK" | "FAILED"
    stage: Optional[str] = None
    error: Optional[str] = None
