import json
import signal
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Optional

import typer
import yaml

from eckprov import __version__, registry
from eckprov.modules.diagnostics import Diagnostics, ERROR
from eckprov.modules.provider import ECKProvider
from eckprov.modules.wait import CancellationToken
from eckprov.utils import redact_sensitive_data


def load_definition(path: Path) -> Dict[str, Any]:
    """Load a resource definition from a YAML file."""
    if not path.exists():
        typer.echo(f"❌ Definition not found: {path}", err=True)
        raise typer.Exit(code=1)
    with open(path) as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        typer.echo(f"❌ {path} must contain a mapping of resource attributes", err=True)
        raise typer.Exit(code=1)
    return data


def state_address(type_name: str, path: Path, address: Optional[str]) -> str:
    return registry.address(type_name, address or path.stem)


def report(diagnostics: Diagnostics) -> None:
    """Print diagnostics and exit non-zero if any is an error."""
    for diagnostic in diagnostics:
        icon = "❌" if diagnostic.severity == ERROR else "⚠️ "
        typer.echo(f"{icon} {diagnostic}", err=True)
    if diagnostics.has_error():
        raise typer.Exit(code=1)


def echo_state(state: Any, show_sensitive: bool = False) -> None:
    data = state.to_dict() if hasattr(state, "to_dict") else state
    if not show_sensitive:
        data = redact_sensitive_data(data)
    typer.echo(json.dumps(data, indent=2))


def get_provider(ctx: typer.Context) -> ECKProvider:
    """Configure the provider once per CLI invocation."""
    settings = ctx.find_root().obj or {}
    provider = settings.get("provider")
    if provider is None:
        provider = ECKProvider(version=__version__)
        report(provider.configure(**settings.get("credentials", {})))
        settings["provider"] = provider
    return provider


@contextmanager
def cancel_on_interrupt():
    """Turn Ctrl-C into a cooperative cancellation of a running wait."""
    token = CancellationToken()

    def _handler(signum, frame):
        typer.echo("🛑 Interrupted, cancelling...", err=True)
        token.cancel()

    try:
        previous = signal.signal(signal.SIGINT, _handler)
    except ValueError:
        # signal handlers can only be installed from the main thread
        previous = None
    try:
        yield token
    finally:
        if previous is not None:
            signal.signal(signal.SIGINT, previous)
