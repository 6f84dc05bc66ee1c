"""Local state of resources applied through the CLI."""
import json
from pathlib import Path
from typing import Any, Dict, Optional

from eckprov.config import Config


def _path(path: Optional[str] = None) -> Path:
    return Path(path or Config.STATE_FILE)


def address(type_name: str, name: str) -> str:
    """Resource address, e.g. ``eck_cluster.demo`` for a definition in ``demo.yaml``."""
    return f"{type_name}.{name}"


def load_registry(path: Optional[str] = None) -> Dict[str, Any]:
    state_path = _path(path)
    if state_path.exists():
        with open(state_path, "r") as f:
            return json.load(f)
    return {}


def save_registry(data: Dict[str, Any], path: Optional[str] = None) -> None:
    state_path = _path(path)
    state_path.parent.mkdir(parents=True, exist_ok=True)
    with open(state_path, "w") as f:
        json.dump(data, f, indent=2, sort_keys=True)


def get_entry(key: str, path: Optional[str] = None) -> Optional[Dict[str, Any]]:
    return load_registry(path).get(key)


def put_entry(key: str, attributes: Dict[str, Any], path: Optional[str] = None) -> None:
    registry = load_registry(path)
    registry[key] = attributes
    save_registry(registry, path)


def remove_entry(key: str, path: Optional[str] = None) -> None:
    registry = load_registry(path)
    if registry.pop(key, None) is not None:
        save_registry(registry, path)
