# src/hoist/observers/console.py
from __future__ import annotations

import typer

from .events import (
    ApiBootstrapped,
    AppsPoolSelected,
    BaseEvent,
    ClusterFormed,
    ComponentInstallFailed,
    ComponentInstallStarted,
    ComponentInstalled,
    FixupFailed,
    HostRegistered,
    MachineProvisionFailed,
    MachineProvisioned,
    MaterialReadFailed,
)


class ConsoleObserver:
    """Human readable progress lines for the interactive CLI."""

    def notify(self, event: BaseEvent) -> None:
        if isinstance(event, MachineProvisioned):
            typer.echo(f"[{event.pool}] machine {event.name} ready at {event.address}")
        elif isinstance(event, MachineProvisionFailed):
            typer.secho(f"[{event.pool}] machine #{event.index} failed: {event.error}", fg="red", err=True)
        elif isinstance(event, ClusterFormed):
            typer.echo(f"[cluster] formed with manager {event.manager} ({len(event.members)} members)")
        elif isinstance(event, ComponentInstallStarted):
            typer.echo(f"Installing {event.name}")
        elif isinstance(event, ComponentInstalled):
            typer.secho(f"{event.name} successfully installed!", fg="green")
        elif isinstance(event, ComponentInstallFailed):
            typer.secho(f"{event.name} failed: {event.error}", fg="red", err=True)
        elif isinstance(event, AppsPoolSelected):
            typer.echo(
                f"[apps] pool is {event.mode}: "
                f"{len(event.fresh)} new, {len(event.reused)} reused"
            )
        elif isinstance(event, ApiBootstrapped):
            typer.echo(f"[api] bootstrapped {event.target} as target '{event.target_name}'")
        elif isinstance(event, FixupFailed):
            typer.secho(
                f"Failed to apply iptables rule on {event.host}: {event.error}. "
                "Maybe it is not needed anymore?",
                fg="yellow",
                err=True,
            )
        elif isinstance(event, MaterialReadFailed):
            typer.secho(f"[register] {event.host}: failed to read {event.path}: {event.error}", fg="yellow", err=True)
        elif isinstance(event, HostRegistered):
            typer.echo(f"[register] host {event.name} registered")
