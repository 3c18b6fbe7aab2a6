from hoist.installer.fixup import FIXUP_COMMANDS, apply_fixups
from hoist.machine.memory import InMemoryProvisioner
from hoist.observers.dispatcher import EventBus
from hoist.observers.events import FixupFailed


class Capture:
    def __init__(self):
        self.events = []

    def notify(self, event):
        self.events.append(event)


class FakeRunner:
    def __init__(self, rc=0, err=""):
        self.rc = rc
        self.err = err
        self.commands = []
        self.closed = False

    def run(self, cmd, *, sudo=False, timeout=None):
        self.commands.append(cmd)
        return self.rc, "", self.err

    def close(self):
        self.closed = True


def _machines(n):
    prov = InMemoryProvisioner()
    return [prov.provision_machine({}) for _ in range(n)]


def test_runs_both_commands_on_every_machine():
    runners = {}

    def connect(machine):
        runners[machine.name] = FakeRunner()
        return runners[machine.name]

    warnings = apply_fixups(_machines(2), connect=connect)

    assert warnings == []
    for runner in runners.values():
        assert runner.commands == list(FIXUP_COMMANDS)
        assert runner.closed
    assert "-i docker_gwbridge -o docker0" in FIXUP_COMMANDS[0]
    assert "-i docker0 -o docker_gwbridge" in FIXUP_COMMANDS[1]


def test_failures_are_warnings_not_errors():
    cap = Capture()
    runner = FakeRunner(rc=1, err="iptables: Bad rule")

    warnings = apply_fixups(_machines(1), connect=lambda m: runner, bus=EventBus([cap]))

    assert len(warnings) == 2
    assert warnings[0].error == "iptables: Bad rule"
    assert len([e for e in cap.events if isinstance(e, FixupFailed)]) == 2


def test_unreachable_host_is_a_warning():
    def connect(machine):
        raise OSError("connection refused")

    warnings = apply_fixups(_machines(1), connect=connect)

    assert len(warnings) == 2
    assert "connection refused" in warnings[0].error
