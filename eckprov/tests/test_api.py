import asyncio
from types import SimpleNamespace

import pytest
import requests
from fastapi.testclient import TestClient

from eckprov.api.dependencies import get_provider, init_provider_state, run_cancellable
from eckprov.api.main import app
from eckprov.config import Config
from eckprov.modules.provider import ECKProvider
from eckprov.tests.conftest import KUBECONFIG, FakeClient, FakeResponse, cluster_body, control_plane_body

HEADERS = {"X-API-Key": Config.API_KEY}


@pytest.fixture
def client():
    fake = FakeClient()
    provider = ECKProvider()
    provider.client = fake
    app.dependency_overrides[get_provider] = lambda: provider
    yield fake
    app.dependency_overrides.clear()


@pytest.fixture
def api():
    return TestClient(app)


def test_requires_api_key(api, client):
    response = api.get("/controlplanes")
    assert response.status_code == 403
    assert client.calls == []


def test_healthz_is_open(api):
    response = api.get("/healthz")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_list_control_planes(api, client):
    client.responses["list_control_planes"] = [FakeResponse(200, [control_plane_body()])]
    response = api.get("/controlplanes", headers=HEADERS)
    assert response.status_code == 200
    assert response.json()["state"]["controlplanes"][0]["name"] == "default"


def test_create_control_plane(api, client, control_plane_config):
    client.responses["create_control_plane"] = [FakeResponse(201)]
    response = api.post("/controlplanes", json={"config": control_plane_config}, headers=HEADERS)
    assert response.status_code == 201
    assert response.json()["state"] == control_plane_config


def test_invalid_control_plane_is_a_bad_request(api, client):
    response = api.post("/controlplanes", json={"config": {"name": "x"}}, headers=HEADERS)
    assert response.status_code == 400
    assert response.json()["detail"][0]["severity"] == "error"
    assert client.calls == []


def test_missing_control_plane(api, client):
    client.responses["get_control_plane"] = [FakeResponse(404)]
    response = api.get("/controlplanes/gone", headers=HEADERS)
    assert response.status_code == 404


def test_rename_control_plane_is_rejected(api, client, control_plane_config):
    renamed = dict(control_plane_config, name="other")
    response = api.put(
        "/controlplanes/default",
        json={"config": renamed, "prior": control_plane_config},
        headers=HEADERS,
    )
    assert response.status_code == 400
    assert response.json()["detail"][0]["path"] == "name"


def test_update_control_plane(api, client, control_plane_config):
    client.responses["update_control_plane"] = [FakeResponse(200)]
    client.responses["get_control_plane"] = [FakeResponse(200, control_plane_body(version="1.1.0"))]
    planned = {"name": "default", "applicationbundle": {"version": "1.1.0", "autoupgrade": True}}

    response = api.put(
        "/controlplanes/default",
        json={"config": planned, "prior": control_plane_config},
        headers=HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["state"]["applicationbundle"]["version"] == "1.1.0"


def test_create_cluster(api, client, cluster_config):
    client.responses["create_cluster"] = [FakeResponse(202)]
    client.responses["get_cluster"] = [FakeResponse(200, cluster_body(status="Provisioning"))]

    response = api.post("/controlplanes/default/clusters", json={"config": cluster_config}, headers=HEADERS)

    assert response.status_code == 201
    assert response.json()["state"]["status"] == "Provisioning"


def test_create_cluster_remote_failure(api, client, cluster_config):
    client.responses["create_cluster"] = [FakeResponse(500, text="boom")]
    response = api.post("/controlplanes/default/clusters", json={"config": cluster_config}, headers=HEADERS)
    assert response.status_code == 502


def test_cluster_must_match_control_plane(api, client, cluster_config):
    response = api.post("/controlplanes/edge/clusters", json={"config": cluster_config}, headers=HEADERS)
    assert response.status_code == 400
    assert client.calls == []


def test_get_cluster(api, client):
    client.responses["get_cluster"] = [FakeResponse(200, cluster_body(status="Provisioning"))]
    response = api.get("/controlplanes/default/clusters/demo", headers=HEADERS)
    assert response.status_code == 200
    assert response.json()["state"]["name"] == "demo"
    assert [c[0] for c in client.calls] == ["get_cluster"]


def test_delete_cluster(api, client):
    client.responses["delete_cluster"] = [FakeResponse(202)]
    response = api.delete("/controlplanes/default/clusters/demo", headers=HEADERS)
    assert response.status_code == 200
    assert response.json()["deleted"] == "default/demo"


def test_kubeconfig(api, client):
    client.responses["get_kubeconfig"] = [FakeResponse(200, text=KUBECONFIG)]
    response = api.get("/controlplanes/default/clusters/demo/kubeconfig", headers=HEADERS)
    assert response.status_code == 200
    assert response.text == KUBECONFIG


def test_wait_for_cluster(api, client):
    client.responses["get_cluster"] = [FakeResponse(200, cluster_body(status="Provisioned"))]
    response = api.post("/controlplanes/default/clusters/demo/wait?interval=0.01&timeout=5", headers=HEADERS)
    assert response.status_code == 200
    assert response.json()["polls"] == 1


@pytest.mark.parametrize("responses,code", [
    ([FakeResponse(500)], 502),
    ([FakeResponse(200, text="garbage")], 502),
    ([FakeResponse(200, cluster_body(status="Provisioning"))], 504),
])
def test_wait_errors(api, client, responses, code):
    client.responses["get_cluster"] = responses
    response = api.post("/controlplanes/default/clusters/demo/wait?interval=0.01&timeout=0.05", headers=HEADERS)
    assert response.status_code == code


def test_wait_rejects_bad_policy(api, client):
    response = api.post("/controlplanes/default/clusters/demo/wait?interval=0", headers=HEADERS)
    assert response.status_code == 400


ECK_ENV = {
    "ECK_HOST": "https://eck.example.com",
    "ECK_USERNAME": "admin",
    "ECK_PASSWORD": "secret",
    "ECK_PROJECT": "p1",
}


@pytest.fixture
def live(monkeypatch):
    """The real provider dependency with token issue and HTTP stubbed out."""
    for key, value in ECK_ENV.items():
        monkeypatch.setenv(key, value)

    tokens = iter(["tok-1", "tok-2", "tok-3"])
    issued = []

    def token_source(host, username, password, project, insecure):
        token = next(tokens)
        issued.append(token)
        return token

    sent = []
    replies = []

    def request(session, method, url, **kwargs):
        sent.append(session.headers["Authorization"])
        return replies.pop(0)

    monkeypatch.setattr(requests.Session, "request", request)
    init_provider_state(app, lambda: ECKProvider(token_source=token_source))
    yield SimpleNamespace(issued=issued, sent=sent, replies=replies)
    init_provider_state(app)


def test_provider_reauthenticates_after_unauthorized(live):
    live.replies.extend([FakeResponse(401, reason="Unauthorized"), FakeResponse(200, [control_plane_body()])])
    api = TestClient(app)

    first = api.get("/controlplanes", headers=HEADERS)
    second = api.get("/controlplanes", headers=HEADERS)

    assert first.status_code == 502
    assert second.status_code == 200
    assert live.sent == ["Bearer tok-1", "Bearer tok-2"]
    assert live.issued == ["tok-1", "tok-2"]


def test_provider_kept_while_token_is_accepted(live):
    live.replies.extend([FakeResponse(200, [control_plane_body()])] * 2)
    api = TestClient(app)

    assert api.get("/controlplanes", headers=HEADERS).status_code == 200
    assert api.get("/controlplanes", headers=HEADERS).status_code == 200
    assert live.issued == ["tok-1"]


def test_provider_retries_configuration_after_failure(live, monkeypatch):
    monkeypatch.delenv("ECK_HOST")
    api = TestClient(app)

    response = api.get("/controlplanes", headers=HEADERS)
    assert response.status_code == 503
    assert response.json()["detail"][0]["path"] == "host"
    assert app.state.provider is None

    monkeypatch.setenv("ECK_HOST", ECK_ENV["ECK_HOST"])
    live.replies.append(FakeResponse(200, [control_plane_body()]))
    assert api.get("/controlplanes", headers=HEADERS).status_code == 200
    assert live.sent == ["Bearer tok-1"]


def test_provider_configured_at_startup(live):
    with TestClient(app):
        assert app.state.provider is not None
        assert app.state.provider.client.session.headers["Authorization"] == "Bearer tok-1"
    assert app.state.provider is None


def test_startup_tolerates_missing_settings(live, monkeypatch):
    monkeypatch.delenv("ECK_PASSWORD")
    with TestClient(app) as api:
        assert app.state.provider is None
        assert api.get("/healthz").status_code == 200


class DisconnectedRequest:
    url = SimpleNamespace(path="/controlplanes/default/clusters/demo/wait")

    async def is_disconnected(self):
        return True


class ConnectedRequest(DisconnectedRequest):
    async def is_disconnected(self):
        return False


def test_disconnect_cancels_running_operation():
    # waits up to 5 s unless the token is cancelled
    cancelled = asyncio.run(run_cancellable(DisconnectedRequest(), lambda token: token.wait(5)))
    assert cancelled is True


def test_connected_operation_runs_to_completion():
    result = asyncio.run(run_cancellable(ConnectedRequest(), lambda value, token: (value, token.cancelled), "done"))
    assert result == ("done", False)
