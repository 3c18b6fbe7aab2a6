# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/cli/app.py
from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from hoist.api.client import PlatformAPIError, PlatformClient
from hoist.api.models import HostRecord
from hoist.api.targets import TargetStore, TargetStoreError
from hoist.cluster.memory import InMemoryCluster
from hoist.cluster.swarm import SwarmCluster
from hoist.components.catalog import build_catalog
from hoist.config.loader import resolve
from hoist.installer.errors import InstallerError, ProvisionError
from hoist.installer.orchestrator import Installer
from hoist.logging.log import init_logging
from hoist.machine.docker_machine import DockerMachineProvisioner
from hoist.machine.memory import InMemoryProvisioner
from hoist.machine.state import probe_state
from hoist.observers.console import ConsoleObserver
from hoist.observers.dispatcher import EventBus
from hoist.observers.events import new_ctx
from hoist.observers.jsonfile import JsonFileObserver
from hoist.observers.logger import LoggerObserver
from hoist.utils.execution import ExecutionContext
from hoist.utils.paths import logs_dir
from hoist.utils.ssh import connect, interactive_shell, load_pkey_text
from hoist.utils.ssh_runner import SSHRunner


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Hoist platform installer")
console = Console()


def _fail(exc: Exception) -> None:
    typer.secho(f"Error: {exc}", fg="red", err=True)
    raise typer.Exit(code=1)


def _current_client(targets: TargetStore) -> PlatformClient:
    target = targets.current()
    if target is None:
        raise TargetStoreError("no current target, run `hoist install` first")
    return PlatformClient(target.url, token=target.token)


def _host_address(host: HostRecord) -> str:
    return str(host.driver.get("IPAddress") or "")


# ------------------------------------------------------------------------------
# install
# ------------------------------------------------------------------------------

@app.command("install")
def install(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Walk every stage against in-memory machines"),
    debug: bool = typer.Option(False, "--debug", help="Log debug output to the console"),
):
    """
    Provision hosts, form the cluster and install the platform.
    """
    logger, run_id, log_path = init_logging(verbose=debug)
    ctx = ExecutionContext(dry_run=dry_run)

    try:
        plan = resolve(config)
    except InstallerError as exc:
        _fail(exc)

    bus = EventBus(
        observers=[
            ConsoleObserver(),
            LoggerObserver(logger),
            JsonFileObserver(logs_dir() / f"{run_id}.jsonl"),
        ]
    )
    run_ctx = new_ctx(platform=plan.name, run_id=run_id)

    if ctx.dry_run:
        provisioner = InMemoryProvisioner(name=plan.name, driver_name=plan.driver_name)
        cluster_factory = InMemoryCluster.form
        catalog = build_catalog(wait_for_api=False)
    else:
        try:
            provisioner = DockerMachineProvisioner.from_plan(plan)
        except Exception as exc:
            _fail(ProvisionError(f"failed to create docker machine: {exc}"))

        def cluster_factory(machines, candidates):
            return SwarmCluster.form(machines, candidates, network=plan.components.network)

        catalog = build_catalog()

    installer = Installer(
        plan,
        provisioner,
        cluster_factory,
        PlatformClient,
        TargetStore(),
        catalog=catalog,
        bus=bus,
        run_ctx=run_ctx,
        ctx=ctx,
        console=console,
    )

    typer.echo("Running pre-install checks...")
    try:
        report = installer.run()
    except InstallerError as exc:
        typer.secho(f"Full log: {log_path}", err=True)
        _fail(exc)

    typer.secho(f"Installation of {plan.name} finished.", fg="green")
    if report.target:
        typer.echo(f"Platform API: {report.target}")


# ------------------------------------------------------------------------------
# uninstall
# ------------------------------------------------------------------------------

@app.command("uninstall")
def uninstall(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file"),
):
    """
    Remove every machine created for the installation and forget its target.
    """
    init_logging()
    try:
        plan = resolve(config)
    except InstallerError as exc:
        _fail(exc)

    try:
        provisioner = DockerMachineProvisioner.from_plan(plan)
    except Exception as exc:
        _fail(exc)
    try:
        provisioner.delete_all()
    except Exception as exc:
        _fail(exc)
    finally:
        provisioner.close()
    typer.echo("Machines successfully removed!")

    targets = TargetStore()
    name = plan.components.target_name
    try:
        if targets.exists(name):
            targets.remove(name)
            typer.echo(f"Target {name} removed!")
    except TargetStoreError as exc:
        _fail(exc)


# ------------------------------------------------------------------------------
# install-host-list
# ------------------------------------------------------------------------------

@app.command("install-host-list")
def install_host_list():
    """
    List the hosts registered by the installer.
    """
    try:
        hosts = _current_client(TargetStore()).list_hosts()
    except (PlatformAPIError, TargetStoreError) as exc:
        _fail(exc)

    table = Table()
    table.add_column("Name", style="cyan")
    table.add_column("Driver Name")
    table.add_column("State")
    table.add_column("Driver")

    for host in hosts:
        state = probe_state(_host_address(host))
        table.add_row(
            host.name,
            host.driver_name,
            state.value,
            json.dumps(host.driver, indent=2, sort_keys=True),
        )
    console.print(table)


# ------------------------------------------------------------------------------
# install-ssh
# ------------------------------------------------------------------------------

@app.command("install-ssh")
def install_ssh(
    hostname: str = typer.Argument(..., help="Registered host name"),
    args: Optional[List[str]] = typer.Argument(None, help="Command to run instead of a shell"),
):
    """
    Open a shell on a registered host, or run a single command on it.
    """
    try:
        host = _current_client(TargetStore()).get_host(hostname)
    except (PlatformAPIError, TargetStoreError) as exc:
        _fail(exc)

    try:
        client = connect(
            address=_host_address(host),
            username=str(host.driver.get("SSHUser") or "docker"),
            pkey=load_pkey_text(host.ssh_private_key),
            port=int(host.driver.get("SSHPort") or 22),
        )
    except Exception as exc:
        _fail(exc)

    if not args:
        try:
            interactive_shell(client)
        finally:
            client.close()
        return

    runner = SSHRunner(client, host=hostname)
    try:
        rc, out, err = runner.run(" ".join(args))
    finally:
        runner.close()
    if out:
        typer.echo(out, nl=False)
    if err:
        typer.echo(err, nl=False, err=True)
    if rc != 0:
        raise typer.Exit(code=rc)


if __name__ == "__main__":
    app()
