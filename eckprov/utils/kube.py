import os
from pathlib import Path

from kubernetes import client, config


def write_kubeconfig(content: str, path: str) -> str:
    """
    Write a kubeconfig fetched from the ECK API to disk, readable only by the owner.
    Returns the resolved path.
    """
    resolved = Path(os.path.expanduser(path)).resolve()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(resolved, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    # an existing file keeps its old mode through O_CREAT
    os.fchmod(fd, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write(content)
    return str(resolved)


def check_kubeconfig(path: str) -> int:
    """
    Load the kubeconfig at ``path`` and list the cluster's nodes.
    Returns the node count; raises if the API server cannot be reached.
    """
    resolved = Path(os.path.expanduser(path)).resolve()
    if not resolved.exists():
        raise FileNotFoundError(f"❌ Kubeconfig not found: {resolved}")

    api_client = config.new_client_from_config(config_file=str(resolved))
    try:
        nodes = client.CoreV1Api(api_client).list_node()
    finally:
        api_client.close()
    return len(nodes.items)
