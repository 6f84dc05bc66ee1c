import copy
import json

import pytest

from eckprov.config import Config


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None, reason=""):
        if text is None:
            text = json.dumps(body) if body is not None else ""
        self.status_code = status_code
        self.text = text
        self.content = text.encode()
        self.reason = reason

    def json(self):
        return json.loads(self.text)


class FakeClock:
    """Virtual time; ``on_sleep`` runs after each sleep with the elapsed time."""

    def __init__(self, on_sleep=None):
        self.time = 0.0
        self.sleeps = []
        self.on_sleep = on_sleep

    def now(self):
        return self.time

    def sleep(self, seconds, token=None):
        if token is not None and token.cancelled:
            return True
        self.sleeps.append(seconds)
        self.time += seconds
        if self.on_sleep is not None:
            self.on_sleep(self.time)
        return token is not None and token.cancelled


class FakeClient:
    """Stands in for ECKClient, replaying scripted responses per method.

    The last scripted item of a method repeats; exceptions are raised.
    """

    def __init__(self, **responses):
        self.responses = {k: list(v) if isinstance(v, list) else [v] for k, v in responses.items()}
        self.calls = []

    def _next(self, method, *args):
        self.calls.append((method,) + args)
        queue = self.responses.get(method)
        if not queue:
            raise AssertionError(f"unexpected call {method}{args}")
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return item

    def called(self, method):
        return [call for call in self.calls if call[0] == method]

    def list_control_planes(self):
        return self._next("list_control_planes")

    def create_control_plane(self, body):
        return self._next("create_control_plane", body)

    def get_control_plane(self, name):
        return self._next("get_control_plane", name)

    def update_control_plane(self, name, body):
        return self._next("update_control_plane", name, body)

    def delete_control_plane(self, name):
        return self._next("delete_control_plane", name)

    def create_cluster(self, control_plane, body):
        return self._next("create_cluster", control_plane, body)

    def get_cluster(self, control_plane, name):
        return self._next("get_cluster", control_plane, name)

    def update_cluster(self, control_plane, name, body):
        return self._next("update_cluster", control_plane, name, body)

    def delete_cluster(self, control_plane, name):
        return self._next("delete_cluster", control_plane, name)

    def get_kubeconfig(self, control_plane, name):
        return self._next("get_kubeconfig", control_plane, name)


KUBECONFIG = "apiVersion: v1\nkind: Config\nclusters: []\n"

CLUSTER_CONFIG = {
    "name": "demo",
    "eckcp": "default",
    "controlplane": {"flavor": "g.4.standard", "image": "ubuntu-2204", "replicas": 3, "version": "v1.24.7"},
    "clusternetwork": {
        "dnsnameservers": ["8.8.8.8"],
        "nodeprefix": "192.168.0.0/24",
        "podprefix": "10.0.0.0/16",
        "serviceprefix": "172.16.0.0/12",
    },
    "clusteropenstack": {"externalnetworkid": "ext-net", "sshkey": "deploy"},
    "clusterfeatures": {"autoscaling": True, "ingress": True},
    "workloadnodepools": [
        {"name": "general", "flavor": "g.4.standard", "image": "ubuntu-2204", "replicas": 3, "version": "v1.24.7"},
    ],
}

CONTROL_PLANE_CONFIG = {"name": "default", "applicationbundle": {"version": "1.0.1", "autoupgrade": True}}


def cluster_body(name="demo", status="Provisioned"):
    return {
        "name": name,
        "status": {"name": name, "status": status},
        "applicationBundle": {"name": "kubernetes-cluster-1.4.1", "version": "1.4.1"},
        "controlPlane": {"version": "v1.24.7", "imageName": "ubuntu-2204", "flavorName": "g.4.standard", "replicas": 3},
        "network": {
            "dnsNameservers": ["8.8.8.8"],
            "nodePrefix": "192.168.0.0/24",
            "servicePrefix": "172.16.0.0/12",
            "podPrefix": "10.0.0.0/16",
        },
        "openstack": {
            "computeAvailabilityZone": "nova",
            "volumeAvailabilityZone": "nova",
            "externalNetworkID": "ext-net",
            "sshKeyName": "deploy",
        },
        "features": {"autoscaling": True, "ingress": True},
        "workloadPools": [
            {
                "name": "general",
                "machine": {
                    "version": "v1.24.7",
                    "imageName": "ubuntu-2204",
                    "flavorName": "g.4.standard",
                    "replicas": 3,
                    "disk": {"size": 50},
                },
            },
        ],
    }


def control_plane_body(name="default", version="1.0.1", autoupgrade=True):
    body = {"name": name, "applicationBundle": {"name": f"control-plane-{version}", "version": version}}
    if autoupgrade:
        body["applicationBundleAutoUpgrade"] = {"daysOfWeek": {"monday": {"start": 0, "end": 7}}}
    return body


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cluster_config():
    return copy.deepcopy(CLUSTER_CONFIG)


@pytest.fixture
def control_plane_config():
    return copy.deepcopy(CONTROL_PLANE_CONFIG)


@pytest.fixture
def state_file(tmp_path, monkeypatch):
    path = tmp_path / "eck-state.json"
    monkeypatch.setattr(Config, "STATE_FILE", str(path))
    return path
