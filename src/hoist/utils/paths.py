# src/hoist/utils/paths.py

from __future__ import annotations

import os
from pathlib import Path


def hoist_home() -> Path:
    """
    Local state directory (logs, machine storage, targets).

    HOIST_HOME overrides the default ~/.hoist.
    """
    env = os.environ.get("HOIST_HOME")
    if env:
        return Path(env)
    return Path.home() / ".hoist"


def machines_dir(installation: str) -> Path:
    return hoist_home() / "machines" / installation


def logs_dir() -> Path:
    return hoist_home() / "logs"


def targets_file() -> Path:
    return hoist_home() / "targets.yaml"
