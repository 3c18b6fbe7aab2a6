import json

from hoist.cluster.models import PortMapping, ServiceSpec
from hoist.cluster.swarm import SwarmCluster
from hoist.machine.models import Machine


def _machine(n: int) -> Machine:
    return Machine(
        name=f"hoist-{n}",
        driver_name="virtualbox",
        address=f"192.168.99.{100 + n}",
        private_address=f"10.0.0.{n}",
        ssh_key_path="/keys/id_rsa",
        ca_path="/certs",
    )


class FakeRunner:
    """Answers commands by the first matching substring in `responses`."""

    def __init__(self, host, log, responses):
        self.host = host
        self.log = log
        self.responses = responses
        self.closed = False

    def run(self, cmd, *, sudo=False, timeout=None):
        self.log.append((self.host, cmd))
        for needle, reply in self.responses.items():
            if needle in cmd:
                return reply
        return 0, "", ""

    def check(self, cmd, *, sudo=False, timeout=None):
        rc, out, err = self.run(cmd)
        if rc != 0:
            raise RuntimeError(err)
        return out

    def put_text(self, content, remote_path, *, sudo=False):
        self.log.append((self.host, f"put {remote_path}"))

    def close(self):
        self.closed = True


def _connect_factory(log, responses):
    runners = {}

    def connect(machine):
        runners[machine.name] = FakeRunner(machine.name, log, responses.get(machine.name, {}))
        return runners[machine.name]

    return connect, runners


def test_form_inits_manager_and_joins_workers():
    log = []
    responses = {
        "hoist-1": {
            "LocalNodeState": (0, "inactive\n", ""),
            "join-token": (0, "SWMTKN-1\n", ""),
            "network inspect": (1, "", "no such network"),
        },
        "hoist-2": {"LocalNodeState": (0, "inactive\n", "")},
    }
    connect, runners = _connect_factory(log, responses)
    m1, m2 = _machine(1), _machine(2)

    cluster = SwarmCluster.form([m1, m2], [m1], connect=connect)

    cmds = [c for _, c in log]
    assert any("swarm init --advertise-addr 10.0.0.1" in c for c in cmds)
    assert ("hoist-2", "sudo docker swarm join --token SWMTKN-1 10.0.0.1:2377") in log
    assert any("network create --driver overlay --attachable hoist" in c for c in cmds)
    assert cluster.manager().address == m1.address

    cluster.close()
    assert all(r.closed for r in runners.values())


def test_form_skips_init_when_swarm_already_active():
    log = []
    responses = {"hoist-1": {"LocalNodeState": (0, "active\n", ""), "join-token": (0, "T\n", "")}}
    connect, _ = _connect_factory(log, responses)
    m1 = _machine(1)

    SwarmCluster.form([m1], [m1], connect=connect)

    assert not any("swarm init" in c for _, c in log)
    assert not any("network create" in c for _, c in log)


def test_run_component_creates_service_with_config():
    log = []
    responses = {
        "hoist-1": {
            "service inspect": (1, "", "not found"),
            "config inspect": (1, "", "not found"),
        }
    }
    connect, _ = _connect_factory(log, responses)
    m1 = _machine(1)
    cluster = SwarmCluster([m1], m1, connect=connect)

    spec = ServiceSpec(
        image="tsuru/api:v1",
        ports=[PortMapping(8080, 8080)],
        env={"A": "1"},
        configs={"/etc/tsuru/tsuru.conf": "listen: :8080\n"},
        constraints=["node.role==manager"],
    )
    cluster.run_component("api", spec)

    create = [c for _, c in log if "service create" in c][0]
    assert "--name api" in create
    assert "--publish 8080:8080" in create
    assert "--env A=1" in create
    assert "target=/etc/tsuru/tsuru.conf" in create
    assert create.rstrip().endswith("tsuru/api:v1")
    assert any(c.startswith("put /tmp/hoist-api-") for _, c in log)


def test_run_component_leaves_existing_service():
    log = []
    connect, _ = _connect_factory(log, {"hoist-1": {"service inspect": (0, "[]", "")}})
    m1 = _machine(1)
    cluster = SwarmCluster([m1], m1, connect=connect)

    cluster.run_component("redis", ServiceSpec(image="redis:3.2"))

    assert not any("service create" in c for _, c in log)


def test_cluster_info_and_component_status():
    nodes = [
        {"Description": {"Hostname": "hoist-1"}, "Status": {"State": "ready"}, "ManagerStatus": {"Leader": True}},
        {"Description": {"Hostname": "hoist-2"}, "Status": {"State": "ready", "Addr": "10.0.0.2"}},
    ]
    service = [{
        "Spec": {"Mode": {"Global": {}}, "TaskTemplate": {"ContainerSpec": {"Image": "tsuru/planb:v1"}}},
        "Endpoint": {"Ports": [{"PublishedPort": 80, "TargetPort": 8080}]},
    }]
    responses = {
        "hoist-1": {
            "node ls -q": (0, "id1\nid2\n", ""),
            "node inspect": (0, json.dumps(nodes), ""),
            "service inspect": (0, json.dumps(service), ""),
        }
    }
    connect, _ = _connect_factory([], responses)
    m1, m2 = _machine(1), _machine(2)
    cluster = SwarmCluster([m1, m2], m1, connect=connect)

    members = cluster.cluster_info()
    assert [(m.address, m.is_manager) for m in members] == [
        ("192.168.99.101", True),
        ("192.168.99.102", False),
    ]

    status = cluster.component_status("planb")
    assert status.ports == ["80:8080"]
    assert status.replicas == 2
    assert status.image == "tsuru/planb:v1"
