# src/hoist/installer/summary.py

from __future__ import annotations

import logging
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from hoist.cluster.interface import Cluster
from hoist.components.component import PlatformComponent
from hoist.machine.models import Machine

log = logging.getLogger("hoist")


def core_hosts_table(cluster: Cluster) -> Table:
    table = Table(title="Core Hosts")
    table.add_column("IP", style="cyan")
    table.add_column("State")
    table.add_column("Manager")

    try:
        members = cluster.cluster_info()
    except Exception as exc:
        log.warning("failed to retrieve cluster info: %s", exc)
        table.add_row("?", f"[red]{exc}[/red]", "")
        return table

    for m in members:
        table.add_row(m.address, m.state, "true" if m.is_manager else "false")
    return table


def components_table(catalog: Sequence[PlatformComponent], cluster: Cluster) -> Table:
    table = Table(title="Core Components")
    table.add_column("Component", style="cyan")
    table.add_column("Ports")
    table.add_column("Replicas")

    for component in catalog:
        try:
            status = component.status(cluster)
        except Exception as exc:
            log.warning("failed to get %s status: %s", component.name, exc)
            table.add_row(component.name, "?", f"[red]{exc}[/red]")
            continue
        table.add_row(component.name, ", ".join(status.ports), str(status.replicas))
    return table


def apps_hosts_table(machines: Sequence[Machine]) -> Table:
    table = Table(title="Apps Hosts")
    table.add_column("Name", style="cyan")
    table.add_column("Address")

    for m in machines:
        table.add_row(m.name, m.address)
    return table


def render_summary(
    cluster: Cluster,
    catalog: Sequence[PlatformComponent],
    apps_machines: Sequence[Machine],
    *,
    console: Optional[Console] = None,
) -> None:
    """Print the post-install overview. Never raises on status lookups."""
    console = console or Console()
    console.print(core_hosts_table(cluster))
    console.print(components_table(catalog, cluster))
    console.print(apps_hosts_table(apps_machines))
