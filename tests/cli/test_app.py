import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

import hoist.cli.app as cli
from hoist.api.models import HostRecord
from hoist.api.targets import TargetStore
from hoist.machine.models import MachineState

runner = CliRunner()


@pytest.fixture(autouse=True)
def hoist_home(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("HOIST_HOME", str(tmp_path))
    yield tmp_path
    logger = logging.getLogger("hoist")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


def test_dry_run_install(hoist_home: Path):
    result = runner.invoke(cli.app, ["install", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Installing MongoDB" in result.output
    assert "Platform API successfully installed!" in result.output
    assert "Installation of hoist finished." in result.output
    assert list((hoist_home / "logs").glob("*.jsonl"))


def test_install_with_bad_config_exits_1(tmp_path: Path):
    cfg = tmp_path / "bad.yaml"
    cfg.write_text("hosts:\n  core:\n    size: zero\n")

    result = runner.invoke(cli.app, ["install", "-c", str(cfg), "--dry-run"])

    assert result.exit_code == 1
    assert "config:" in result.output


def test_install_refuses_existing_target(hoist_home: Path):
    TargetStore(hoist_home / "targets.yaml").add("hoist", "http://old:8080")

    result = runner.invoke(cli.app, ["install", "--dry-run"])

    assert result.exit_code == 1
    assert "pre-install checks" in result.output


class FakeClient:
    hosts = [
        HostRecord(name="hoist-1", driverName="virtualbox", driver={"IPAddress": "192.168.99.101"}, sshPrivateKey="K"),
    ]

    def __init__(self, target, token=None):
        self.target = target
        self.token = token

    def list_hosts(self):
        return self.hosts

    def get_host(self, name):
        return self.hosts[0]


def test_install_host_list(hoist_home: Path, monkeypatch):
    TargetStore(hoist_home / "targets.yaml").add("hoist", "http://192.168.99.101:8080", "tok")
    monkeypatch.setattr(cli, "PlatformClient", FakeClient)
    monkeypatch.setattr(cli, "probe_state", lambda address: MachineState.RUNNING)

    result = runner.invoke(cli.app, ["install-host-list"])

    assert result.exit_code == 0, result.output
    assert "hoist-1" in result.output
    assert "running" in result.output


def test_install_host_list_without_target():
    result = runner.invoke(cli.app, ["install-host-list"])

    assert result.exit_code == 1
    assert "no current target" in result.output


def test_install_ssh_runs_command(hoist_home: Path, monkeypatch):
    TargetStore(hoist_home / "targets.yaml").add("hoist", "http://192.168.99.101:8080", "tok")
    monkeypatch.setattr(cli, "PlatformClient", FakeClient)
    monkeypatch.setattr(cli, "load_pkey_text", lambda text: "PKEY")
    seen = {}

    def fake_connect(**kwargs):
        seen.update(kwargs)
        return object()

    class FakeRunner:
        def __init__(self, client, host=""):
            pass

        def run(self, cmd, *, sudo=False, timeout=None):
            seen["cmd"] = cmd
            return 0, "hello\n", ""

        def close(self):
            pass

    monkeypatch.setattr(cli, "connect", fake_connect)
    monkeypatch.setattr(cli, "SSHRunner", FakeRunner)

    result = runner.invoke(cli.app, ["install-ssh", "hoist-1", "echo", "hello"])

    assert result.exit_code == 0, result.output
    assert "hello" in result.output
    assert seen["address"] == "192.168.99.101"
    assert seen["username"] == "docker"
    assert seen["pkey"] == "PKEY"
    assert seen["cmd"] == "echo hello"
