import io
import json
from pathlib import Path

import pytest
from rich.console import Console

from hoist.api.client import PlatformClient
from hoist.api.targets import TargetStore
from hoist.cluster.memory import InMemoryCluster
from hoist.components.catalog import build_catalog
from hoist.config.models import ComponentsSettings, InstallationPlan
from hoist.installer import orchestrator
from hoist.installer.errors import (
    BootstrapError,
    ComponentInstallError,
    InstallerError,
    PreflightError,
    ProvisionError,
)
from hoist.installer.orchestrator import Installer
from hoist.machine.memory import InMemoryProvisioner
from hoist.observers.dispatcher import EventBus
from hoist.observers.events import InstallSummary
from hoist.utils.execution import ExecutionContext


class Capture:
    def __init__(self):
        self.events = []

    def notify(self, event):
        self.events.append(event)

    def names(self):
        return [type(e).__name__ for e in self.events]


class FakeClient:
    def __init__(self, target, log):
        self.target = target
        self.log = log

    def bootstrap(self, **kwargs):
        self.log.append(("bootstrap", self.target, kwargs))
        return "tok"

    def register_host(self, fields):
        self.log.append(("register", self.target, fields["name"]))


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self.content = b"" if payload is None else json.dumps(payload).encode()
        self.text = self.content.decode()
        self._payload = payload

    def json(self):
        return self._payload


class FakeSession:
    """Answers bootstrap with a token and every other call with 201."""

    def __init__(self, token="secret-token"):
        self.token = token
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        if url.endswith("/install/bootstrap"):
            return FakeResponse(200, {"token": self.token})
        return FakeResponse(201)


class FakeRunner:
    def __init__(self, log, host):
        self.log = log
        self.host = host

    def run(self, cmd, *, sudo=False, timeout=None):
        self.log.append(("ssh", self.host, cmd))
        return 0, "", ""

    def close(self):
        pass


class Harness:
    def __init__(self, tmp_path: Path, plan: InstallationPlan, *, fail_on=(), fail_at=None, dry_run=False, client_factory=None):
        self.log = []
        self.capture = Capture()
        self.clusters = []
        self.provisioner = InMemoryProvisioner(name=plan.name, fail_at=fail_at, state_dir=tmp_path)
        self.targets = TargetStore(tmp_path / "targets.yaml")
        self.out = io.StringIO()

        def cluster_factory(machines, candidates):
            cluster = InMemoryCluster.form(machines, candidates, fail_on=fail_on)
            self.clusters.append(cluster)
            return cluster

        self.installer = Installer(
            plan,
            self.provisioner,
            cluster_factory,
            client_factory or (lambda target: FakeClient(target, self.log)),
            self.targets,
            catalog=build_catalog(wait_for_api=False),
            bus=EventBus([self.capture]),
            ctx=ExecutionContext(dry_run=dry_run),
            ssh_connect=lambda m: FakeRunner(self.log, m.address),
            console=Console(file=self.out, width=120),
        )


def _plan(**kwargs):
    kwargs.setdefault("components", ComponentsSettings(target_name="prod"))
    return InstallationPlan(name="prod", **kwargs)


def test_full_run_mixed_pool(tmp_path: Path):
    h = Harness(tmp_path, _plan(core_hosts=2, apps_hosts=3))

    report = h.installer.run()

    assert [m.name for m in report.core_machines] == ["prod-1", "prod-2"]
    assert [m.name for m in report.apps_machines] == ["prod-3", "prod-1", "prod-2"]
    assert report.target == "http://192.168.99.101:8080"
    assert report.token == "tok"

    cluster = h.clusters[0]
    assert cluster.run_order == ["mongo", "redis", "planb", "registry", "api"]

    bootstrap = [entry for entry in h.log if entry[0] == "bootstrap"][0]
    assert bootstrap[2]["nodes"] == ["10.0.0.3", "10.0.0.1", "10.0.0.2"]
    assert bootstrap[2]["target_name"] == "prod"

    ssh_hosts = {entry[1] for entry in h.log if entry[0] == "ssh"}
    assert ssh_hosts == {"192.168.99.101", "192.168.99.102"}

    registered = [entry[2] for entry in h.log if entry[0] == "register"]
    assert sorted(registered) == ["prod-1", "prod-2", "prod-3"]
    assert report.registration.registered == registered

    assert h.targets.current().name == "prod"
    assert h.provisioner.closed and cluster.closed
    assert h.provisioner.deleted is False
    assert "Core Components" in h.out.getvalue()
    assert h.capture.events[-1].status == "OK"

    names = h.capture.names()
    assert names.index("ClusterFormed") < names.index("ComponentInstallStarted")
    assert names.index("ComponentInstalled") < names.index("AppsPoolSelected")
    assert names.index("AppsPoolSelected") < names.index("ApiBootstrapped")
    assert names.index("ApiBootstrapped") < names.index("HostRegistered")


def test_existing_target_fails_pre_install_checks(tmp_path: Path):
    h = Harness(tmp_path, _plan())
    h.targets.add("prod", "http://old:8080")

    with pytest.raises(PreflightError, match='"prod" already exists'):
        h.installer.run()

    assert h.provisioner.calls == []
    assert h.provisioner.closed


def test_component_failure_keeps_machines_and_closes_handles(tmp_path: Path):
    h = Harness(tmp_path, _plan(core_hosts=2), fail_on={"planb"})

    with pytest.raises(ComponentInstallError) as ei:
        h.installer.run()

    assert ei.value.component == "PlanB"
    cluster = h.clusters[0]
    assert cluster.run_order == ["mongo", "redis", "planb"]
    assert cluster.closed and h.provisioner.closed
    assert h.provisioner.deleted is False
    assert len(h.provisioner.machines) == 2
    assert not any(entry[0] == "bootstrap" for entry in h.log)

    summary = h.capture.events[-1]
    assert isinstance(summary, InstallSummary)
    assert (summary.status, summary.stage) == ("FAILED", "install")


def test_apps_provision_failure_leaves_core_running(tmp_path: Path):
    h = Harness(tmp_path, _plan(core_hosts=1, apps_hosts=2, dedicated_apps_hosts=True), fail_at=2)

    with pytest.raises(ProvisionError):
        h.installer.run()

    assert [m.name for m in h.provisioner.machines] == ["prod-1", "prod-2"]
    assert h.provisioner.deleted is False
    assert h.clusters[0].closed


def test_dry_run_skips_remote_stages(tmp_path: Path):
    h = Harness(tmp_path, _plan(), dry_run=True)

    report = h.installer.run()

    assert h.log == []
    assert report.token is None
    assert report.registration is None
    assert not h.targets.exists("prod")
    assert h.clusters[0].run_order[-1] == "api"


def test_registration_uses_the_bootstrap_token(tmp_path: Path):
    session = FakeSession()
    clients = []

    def client_factory(target):
        clients.append(PlatformClient(target, session=session))
        return clients[-1]

    h = Harness(tmp_path, _plan(core_hosts=1, apps_hosts=2), client_factory=client_factory)

    report = h.installer.run()

    assert report.token == "secret-token"
    assert len(clients) == 1
    bootstrap_call = session.requests[0]
    assert bootstrap_call[1] == "http://192.168.99.101:8080/1.3/install/bootstrap"
    assert bootstrap_call[2]["headers"] == {}

    hosts = [r for r in session.requests if r[1].endswith("/install/hosts")]
    assert len(hosts) == 2
    assert all(r[2]["headers"] == {"Authorization": "bearer secret-token"} for r in hosts)
    assert report.registration.registered == ["prod-1", "prod-2"]


def test_client_factory_failure_is_a_bootstrap_error(tmp_path: Path):
    def client_factory(target):
        raise ValueError("bad target")

    h = Harness(tmp_path, _plan(), client_factory=client_factory)

    with pytest.raises(BootstrapError, match="bad target"):
        h.installer.run()

    summary = h.capture.events[-1]
    assert (summary.status, summary.stage) == ("FAILED", "bootstrap")
    assert h.provisioner.closed and h.clusters[0].closed


def test_unexpected_error_still_reports_failure(tmp_path: Path, monkeypatch):
    def broken_summary(*args, **kwargs):
        raise RuntimeError("console gone")

    monkeypatch.setattr(orchestrator, "render_summary", broken_summary)
    h = Harness(tmp_path, _plan())

    with pytest.raises(InstallerError) as ei:
        h.installer.run()

    assert ei.value.stage == "install"
    assert isinstance(ei.value.__cause__, RuntimeError)
    summary = h.capture.events[-1]
    assert isinstance(summary, InstallSummary)
    assert (summary.status, summary.stage, summary.error) == ("FAILED", "install", "console gone")
    assert h.provisioner.closed and h.clusters[0].closed
    assert not any(entry[0] == "register" for entry in h.log)
