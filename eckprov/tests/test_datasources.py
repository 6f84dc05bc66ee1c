import requests

from eckprov.modules.datasources import ClusterDataSource, ControlPlanesDataSource, KubeconfigDataSource
from eckprov.tests.conftest import KUBECONFIG, FakeClient, FakeResponse, cluster_body, control_plane_body


def test_list_control_planes():
    client = FakeClient(list_control_planes=FakeResponse(200, [
        control_plane_body("default"),
        control_plane_body("edge", version="1.2.0", autoupgrade=False),
    ]))

    result = ControlPlanesDataSource(client).read()

    assert result.ok
    assert [cp.name for cp in result.state.controlplanes] == ["default", "edge"]
    assert result.state.controlplanes[1].applicationbundle.to_dict() == {"version": "1.2.0", "autoupgrade": False}


def test_list_control_planes_bad_json():
    client = FakeClient(list_control_planes=FakeResponse(200, {"not": "a list"}))
    result = ControlPlanesDataSource(client).read()
    assert result.diagnostics.errors()[0].summary == "Unable to read control plane information"


def test_list_control_planes_unreachable():
    client = FakeClient(list_control_planes=requests.Timeout("slow"))
    result = ControlPlanesDataSource(client).read()
    assert result.state is None
    assert result.diagnostics.has_error()


def test_cluster_lookup():
    client = FakeClient(
        get_cluster=FakeResponse(200, cluster_body(status="Provisioned")),
        get_kubeconfig=FakeResponse(200, text=KUBECONFIG),
    )

    result = ClusterDataSource(client).read({"name": "demo"})

    assert result.state.eckcp == "default"
    assert result.state.kubeconfig == KUBECONFIG
    assert client.called("get_cluster") == [("get_cluster", "default", "demo")]


def test_cluster_lookup_not_found():
    client = FakeClient(get_cluster=FakeResponse(404, text="not found"))
    result = ClusterDataSource(client).read({"eckcp": "edge", "name": "demo"})
    assert "404" in result.diagnostics.errors()[0].detail


def test_cluster_lookup_needs_a_name():
    client = FakeClient()
    result = ClusterDataSource(client).read({})
    assert result.diagnostics.has_error()
    assert client.calls == []


def test_kubeconfig():
    client = FakeClient(get_kubeconfig=FakeResponse(200, text=KUBECONFIG))

    result = KubeconfigDataSource(client).read({"eckcp": "edge", "cluster": "demo"})

    assert result.state.to_dict() == {"eckcp": "edge", "cluster": "demo", "kubeconfig": KUBECONFIG}
    assert client.calls == [("get_kubeconfig", "edge", "demo")]


def test_kubeconfig_not_ready():
    client = FakeClient(get_kubeconfig=FakeResponse(409, text="cluster not provisioned"))
    result = KubeconfigDataSource(client).read({"cluster": "demo"})
    assert result.state is None
    assert "cluster not provisioned" in result.diagnostics.errors()[0].detail
