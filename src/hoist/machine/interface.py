# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Any, Dict, Protocol

from .models import Machine


class Provisioner(Protocol):
    def provision_machine(self, options: Dict[str, Any]) -> Machine: ...

    def delete_all(self) -> None: ...

    def close(self) -> None: ...
