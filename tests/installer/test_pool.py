import pytest

from hoist.config.models import InstallationPlan
from hoist.installer.errors import ProvisionError
from hoist.installer.pool import options_for_index, provision_machines, select_apps_pool
from hoist.machine.memory import InMemoryProvisioner
from hoist.observers.dispatcher import EventBus
from hoist.observers.events import AppsPoolSelected, MachineProvisionFailed, MachineProvisioned


class Capture:
    def __init__(self):
        self.events = []

    def notify(self, event):
        self.events.append(event)


def test_zones_cycle_over_indices():
    prov = InMemoryProvisioner()
    machines = provision_machines(prov, 4, {"zone": ["a", "b"]})

    assert [c["zone"] for c in prov.calls] == ["a", "b", "a", "b"]
    assert [m.name for m in machines] == ["hoist-1", "hoist-2", "hoist-3", "hoist-4"]


@pytest.mark.parametrize("count,length", [(1, 1), (5, 2), (7, 3), (3, 5)])
def test_option_index_is_modulo_list_length(count, length):
    values = list(range(length))
    prov = InMemoryProvisioner()
    provision_machines(prov, count, {"k": values})
    assert [c["k"] for c in prov.calls] == [values[i % length] for i in range(count)]


def test_options_for_index_handles_every_key():
    opts = {"zone": ["a", "b"], "size": ["small"]}
    assert options_for_index(opts, 3) == {"zone": "b", "size": "small"}


def test_first_failure_aborts_without_teardown():
    prov = InMemoryProvisioner(fail_at=1)
    cap = Capture()

    with pytest.raises(ProvisionError) as ei:
        provision_machines(prov, 3, {}, bus=EventBus([cap]))

    assert ei.value.stage == "provision"
    assert len(prov.calls) == 2
    assert len(prov.machines) == 1
    assert prov.deleted is False
    assert [type(e) for e in cap.events] == [MachineProvisioned, MachineProvisionFailed]


def _core(n):
    prov = InMemoryProvisioner(name="core")
    return [prov.provision_machine({}) for _ in range(n)]


def test_dedicated_pool_is_all_fresh():
    core = _core(2)
    prov = InMemoryProvisioner(name="apps")
    plan = InstallationPlan(apps_hosts=3, dedicated_apps_hosts=True, apps_driver_options={"zone": ["x"]})

    apps = select_apps_pool(plan, prov, core)

    assert len(apps) == 3
    assert not any(a in core for a in apps)
    assert [c["zone"] for c in prov.calls] == ["x", "x", "x"]


def test_mixed_pool_puts_fresh_machines_first():
    core = _core(3)
    prov = InMemoryProvisioner(name="apps")
    cap = Capture()
    plan = InstallationPlan(apps_hosts=5)

    apps = select_apps_pool(plan, prov, core, bus=EventBus([cap]))

    assert len(apps) == 5
    assert [m.name for m in apps[:2]] == ["apps-1", "apps-2"]
    assert apps[2:] == core
    event = cap.events[-1]
    assert isinstance(event, AppsPoolSelected)
    assert event.mode == "mixed"
    assert event.fresh == ["apps-1", "apps-2"]


@pytest.mark.parametrize("apps_hosts", [0, 1, 3])
def test_reused_pool_takes_core_prefix(apps_hosts):
    core = _core(3)
    prov = InMemoryProvisioner(name="apps")
    plan = InstallationPlan(apps_hosts=apps_hosts)

    apps = select_apps_pool(plan, prov, core)

    assert apps == core[:apps_hosts]
    assert prov.calls == []
