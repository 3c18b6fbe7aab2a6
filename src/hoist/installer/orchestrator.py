# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hoist/installer/orchestrator.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from rich.console import Console

from hoist.api.client import PlatformClient
from hoist.api.targets import TargetStore
from hoist.cluster.formation import form
from hoist.cluster.interface import Cluster, ClusterFactory
from hoist.components.catalog import build_catalog
from hoist.components.component import PlatformComponent
from hoist.config.models import InstallationPlan
from hoist.installer.bootstrap import api_target, bootstrap
from hoist.installer.errors import BootstrapError, InstallerError, PreflightError
from hoist.installer.fixup import FixupWarning, apply_fixups
from hoist.installer.pool import provision_machines, select_apps_pool
from hoist.installer.registrar import RegistrationReport, register_all
from hoist.installer.sequencer import install_all
from hoist.installer.summary import render_summary
from hoist.machine.interface import Provisioner
from hoist.machine.models import Machine
from hoist.observers.dispatcher import EventBus
from hoist.observers.events import InstallSummary, PlanResolved, new_ctx
from hoist.utils.execution import ExecutionContext
from hoist.utils.ssh import open_ssh
from hoist.utils.ssh_runner import SSHRunner

log = logging.getLogger("hoist")

ClientFactory = Callable[[str], PlatformClient]


@dataclass
class InstallReport:
    core_machines: List[Machine] = field(default_factory=list)
    apps_machines: List[Machine] = field(default_factory=list)
    target: Optional[str] = None
    token: Optional[str] = None
    fixup_warnings: List[FixupWarning] = field(default_factory=list)
    registration: Optional[RegistrationReport] = None


class Installer:
    """
    Runs a full installation for one plan.

    Stages, in order:
      pre-install checks -> core pool -> cluster -> components -> apps pool
      -> API bootstrap -> fixups -> summary -> host registration

    Any fatal error stops the run. Provisioned machines are never torn down
    here; `hoist uninstall` does that explicitly. The provisioner and the
    cluster handle are closed on every exit path.
    """

    def __init__(
        self,
        plan: InstallationPlan,
        provisioner: Provisioner,
        cluster_factory: ClusterFactory,
        client_factory: ClientFactory,
        targets: TargetStore,
        *,
        catalog: Optional[Sequence[PlatformComponent]] = None,
        bus: Optional[EventBus] = None,
        run_ctx: Optional[dict] = None,
        ctx: Optional[ExecutionContext] = None,
        ssh_connect: Callable[[Machine], SSHRunner] = open_ssh,
        console: Optional[Console] = None,
    ):
        self.plan = plan
        self.provisioner = provisioner
        self.cluster_factory = cluster_factory
        self.client_factory = client_factory
        self.targets = targets
        self.catalog = tuple(catalog) if catalog is not None else build_catalog()
        self.bus = bus or EventBus()
        self.run_ctx = run_ctx or new_ctx(platform=plan.name)
        self.ctx = ctx or ExecutionContext()
        self.ssh_connect = ssh_connect
        self.console = console
        self._cluster: Optional[Cluster] = None
        self._client: Optional[PlatformClient] = None

    # ------------------------
    # Stages
    # ------------------------

    def pre_install_checks(self) -> None:
        name = self.plan.components.target_name
        try:
            exists = self.targets.exists(name)
        except Exception as exc:
            raise PreflightError(exc) from exc
        if exists:
            raise PreflightError(f'target "{name}" already exists')

    def _bootstrap(self, cluster: Cluster, apps: Sequence[Machine], report: InstallReport) -> None:
        settings = self.plan.components
        target = api_target(cluster.manager().address, settings.api_port)
        report.target = target
        if self.ctx.dry_run:
            log.info("[dry-run] skipping API bootstrap of %s", target)
            return
        try:
            client = self.client_factory(target)
        except Exception as exc:
            raise BootstrapError(f"failed to create API client for {target}: {exc}") from exc
        report.token = bootstrap(
            client,
            admin_login=settings.admin_email,
            admin_password=settings.admin_password,
            target_name=settings.target_name,
            worker_addresses=[m.private_address for m in apps],
            targets=self.targets,
            bus=self.bus,
            run_ctx=self.run_ctx,
        )
        # registration reuses the authenticated client
        self._client = client

    def _run(self, report: InstallReport) -> None:
        plan = self.plan

        log.info("Running pre-install checks")
        self.pre_install_checks()

        report.core_machines = provision_machines(
            self.provisioner,
            plan.core_hosts,
            plan.core_driver_options,
            bus=self.bus,
            run_ctx=self.run_ctx,
            pool="core",
        )

        cluster = form(
            report.core_machines,
            report.core_machines,
            self.cluster_factory,
            bus=self.bus,
            run_ctx=self.run_ctx,
        )
        self._cluster = cluster

        install_all(self.catalog, cluster, plan.components, bus=self.bus, run_ctx=self.run_ctx)

        report.apps_machines = select_apps_pool(
            plan,
            self.provisioner,
            report.core_machines,
            bus=self.bus,
            run_ctx=self.run_ctx,
        )

        self._bootstrap(cluster, report.apps_machines, report)

        if self.ctx.dry_run:
            log.info("[dry-run] skipping iptables fixups")
        else:
            report.fixup_warnings = apply_fixups(
                report.core_machines,
                connect=self.ssh_connect,
                bus=self.bus,
                run_ctx=self.run_ctx,
            )

        render_summary(cluster, self.catalog, report.apps_machines, console=self.console)

        if self.ctx.dry_run:
            log.info("[dry-run] skipping host registration")
            return
        report.registration = register_all(
            report.core_machines + report.apps_machines,
            self._client,
            bus=self.bus,
            run_ctx=self.run_ctx,
        )

    def _close(self) -> None:
        if self._cluster is not None:
            try:
                self._cluster.close()
            except Exception as exc:
                log.warning("failed to close cluster handle: %s", exc)
            self._cluster = None
        try:
            self.provisioner.close()
        except Exception as exc:
            log.warning("failed to close provisioner: %s", exc)

    # ------------------------
    # Entry point
    # ------------------------

    def run(self) -> InstallReport:
        plan = self.plan
        self.bus.emit(
            PlanResolved(
                driver=plan.driver_name,
                core_hosts=plan.core_hosts,
                apps_hosts=plan.apps_hosts,
                dedicated=plan.dedicated_apps_hosts,
                **self.run_ctx,
            )
        )

        report = InstallReport()
        try:
            self._run(report)
        except InstallerError as exc:
            log.error("Installation failed at %s: %s", exc.stage, exc.cause)
            self.bus.emit(InstallSummary(status="FAILED", stage=exc.stage, error=str(exc.cause), **self.run_ctx))
            raise
        except Exception as exc:
            log.error("Installation failed: %s", exc)
            self.bus.emit(InstallSummary(status="FAILED", stage=InstallerError.stage, error=str(exc), **self.run_ctx))
            raise InstallerError(exc) from exc
        finally:
            self._close()

        self.bus.emit(InstallSummary(status="OK", **self.run_ctx))
        return report
