import json
from pathlib import Path

from eckprov import registry
from eckprov.commands import state_address


def test_empty_registry(state_file):
    assert registry.load_registry() == {}
    assert registry.get_entry("eck_cluster.demo") is None


def test_put_and_remove(state_file):
    registry.put_entry("eck_cluster.demo", {"name": "demo"})
    registry.put_entry("eck_controlplane.default", {"name": "default"})

    assert json.loads(state_file.read_text())["eck_cluster.demo"] == {"name": "demo"}
    assert registry.get_entry("eck_controlplane.default") == {"name": "default"}

    registry.remove_entry("eck_cluster.demo")
    assert sorted(registry.load_registry()) == ["eck_controlplane.default"]


def test_creates_parent_directory(tmp_path):
    path = tmp_path / "nested" / "state.json"
    registry.put_entry("eck_cluster.demo", {"name": "demo"}, path=str(path))
    assert path.exists()


def test_address():
    assert registry.address("eck_cluster", "demo") == "eck_cluster.demo"


def test_state_address_uses_definition_file_stem():
    assert state_address("eck_cluster", Path("defs/demo.yaml"), None) == "eck_cluster.demo"


def test_state_address_override():
    assert state_address("eck_controlplane", Path("defs/demo.yaml"), "edge") == "eck_controlplane.edge"
