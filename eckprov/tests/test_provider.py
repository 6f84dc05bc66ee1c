import pytest

from eckprov.modules.client import ECKClient
from eckprov.modules.datasources import KubeconfigDataSource
from eckprov.modules.errors import AuthenticationError, ECKError
from eckprov.modules.provider import ECKProvider
from eckprov.modules.resources import ClusterResource, ControlPlaneResource

CREDENTIALS = {
    "host": "https://eck.example.com",
    "username": "alice",
    "password": "pw",
    "project": "proj-1",
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("ECK_HOST", "ECK_USERNAME", "ECK_PASSWORD", "ECK_PROJECT", "ECK_INSECURE"):
        monkeypatch.delenv(name, raising=False)


def recording_token_source(calls):
    def token_source(host, username, password, project, insecure):
        calls.append((host, username, password, project, insecure))
        return "tok"
    return token_source


def test_configure_with_arguments():
    calls = []
    provider = ECKProvider(token_source=recording_token_source(calls))

    diagnostics = provider.configure(**CREDENTIALS)

    assert not diagnostics
    assert isinstance(provider.client, ECKClient)
    assert provider.client.session.headers["Authorization"] == "Bearer tok"
    assert calls == [("https://eck.example.com", "alice", "pw", "proj-1", False)]


def test_configure_from_environment(monkeypatch):
    calls = []
    monkeypatch.setenv("ECK_HOST", "https://env.example.com")
    monkeypatch.setenv("ECK_USERNAME", "bob")
    monkeypatch.setenv("ECK_PASSWORD", "secret")
    monkeypatch.setenv("ECK_PROJECT", "proj-2")
    monkeypatch.setenv("ECK_INSECURE", "true")
    provider = ECKProvider(token_source=recording_token_source(calls))

    assert not provider.configure(username="carol")
    assert calls == [("https://env.example.com", "carol", "secret", "proj-2", True)]
    assert provider.client.session.verify is False


def test_missing_settings_are_reported_per_attribute():
    calls = []
    provider = ECKProvider(token_source=recording_token_source(calls))

    diagnostics = provider.configure(host="https://eck.example.com", username="alice")

    assert [d.path for d in diagnostics.errors()] == ["password", "project"]
    assert diagnostics.errors()[0].summary == "Missing ECK API Password"
    assert "ECK_PASSWORD" in diagnostics.errors()[0].detail
    assert calls == []
    assert not provider.configured


def test_authentication_failure():
    def token_source(*args):
        raise AuthenticationError("password token request rejected with HTTP 401")

    provider = ECKProvider(token_source=token_source)
    diagnostics = provider.configure(**CREDENTIALS)

    assert diagnostics.errors()[0].summary == "Unable to Create ECK API Client"
    assert "401" in diagnostics.errors()[0].detail
    assert provider.client is None


def test_type_names():
    provider = ECKProvider()
    assert sorted(provider.resources()) == ["eck_cluster", "eck_controlplane"]
    assert sorted(provider.data_sources()) == ["eck_cluster", "eck_controlplanes", "eck_kubeconfig"]


def test_resources_share_the_configured_client():
    provider = ECKProvider(token_source=recording_token_source([]))
    provider.configure(**CREDENTIALS)

    control_plane = provider.resource("eck_controlplane")
    cluster = provider.resource("eck_cluster", interval=5, timeout=50)
    kubeconfig = provider.data_source("eck_kubeconfig")

    assert isinstance(control_plane, ControlPlaneResource)
    assert isinstance(cluster, ClusterResource)
    assert isinstance(kubeconfig, KubeconfigDataSource)
    assert control_plane.client is cluster.client is kubeconfig.client is provider.client
    assert (cluster.waiter.interval, cluster.waiter.timeout) == (5, 50)


def test_providers_are_independent():
    first = ECKProvider(token_source=recording_token_source([]))
    second = ECKProvider(token_source=recording_token_source([]))
    first.configure(**CREDENTIALS)
    second.configure(**{**CREDENTIALS, "project": "proj-2"})
    assert first.client is not second.client


def test_unconfigured_provider():
    with pytest.raises(ECKError):
        ECKProvider().resource("eck_cluster")


def test_unknown_type():
    provider = ECKProvider(token_source=recording_token_source([]))
    provider.configure(**CREDENTIALS)
    with pytest.raises(KeyError):
        provider.data_source("eck_network")
