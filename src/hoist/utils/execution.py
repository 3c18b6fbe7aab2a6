# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from dataclasses import dataclass

@dataclass(frozen=True)
class ExecutionContext:
    """
    controls whether remote side effects are performed

    With dry_run set the installer still walks every stage against
    in-memory machines and cluster, but skips the stages that need a
    reachable host (API bootstrap, fixups, host registration).
    """

    dry_run: bool = False
