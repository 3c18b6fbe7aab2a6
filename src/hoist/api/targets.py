# src/hoist/api/targets.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from hoist.api.models import Target
from hoist.utils.paths import targets_file

log = logging.getLogger("hoist")


class TargetStoreError(RuntimeError):
    pass


class TargetStore:
    """
    Local registry of platform targets, kept in a small YAML file.

        current: hoist
        targets:
          hoist: {url: http://192.168.99.101:8080, token: ...}
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else targets_file()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {"current": None, "targets": {}}
        try:
            data = yaml.safe_load(self.path.read_text()) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise TargetStoreError(f"cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise TargetStoreError(f"{self.path} is not a mapping")
        data.setdefault("current", None)
        data["targets"] = data.get("targets") or {}
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(yaml.safe_dump(data, sort_keys=True))
        except OSError as exc:
            raise TargetStoreError(f"cannot write {self.path}: {exc}") from exc

    def exists(self, name: str) -> bool:
        return name in self._load()["targets"]

    def get(self, name: str) -> Target:
        entry = self._load()["targets"].get(name)
        if entry is None:
            raise TargetStoreError(f"target {name!r} not found")
        return Target(name=name, **entry)

    def add(self, name: str, url: str, token: str = "", *, make_current: bool = True) -> Target:
        data = self._load()
        if name in data["targets"]:
            raise TargetStoreError(f"target {name!r} already exists")
        data["targets"][name] = {"url": url, "token": token}
        if make_current:
            data["current"] = name
        self._save(data)
        log.info("Target %s added (%s)", name, url)
        return Target(name=name, url=url, token=token)

    def current(self) -> Optional[Target]:
        data = self._load()
        name = data.get("current")
        if not name or name not in data["targets"]:
            return None
        return Target(name=name, **data["targets"][name])

    def remove(self, name: str) -> None:
        data = self._load()
        if name not in data["targets"]:
            raise TargetStoreError(f"target {name!r} not found")
        del data["targets"][name]
        if data.get("current") == name:
            data["current"] = None
        self._save(data)
        log.info("Target %s removed", name)
