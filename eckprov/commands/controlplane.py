from pathlib import Path
from typing import Optional

import typer

from eckprov import registry
from eckprov.commands import echo_state, get_provider, load_definition, report, state_address
from eckprov.modules.models import ApplicationBundleModel, ControlPlaneModel

TYPE_NAME = "eck_controlplane"

app = typer.Typer(help="Manage ECK control planes.")


@app.command("apply")
def apply_control_plane(
    ctx: typer.Context,
    file: Path = typer.Option(..., "--file", "-f", help="Control plane definition (YAML)"),
    address: Optional[str] = typer.Option(None, help="State address, defaults to the file name"),
):
    """Create, update or replace a control plane to match its definition."""
    config = load_definition(file)
    key = state_address(TYPE_NAME, file, address)
    prior_attributes = registry.get_entry(key)

    resource = get_provider(ctx).resource(TYPE_NAME)
    plan, diagnostics = resource.plan(config, prior_attributes)
    report(diagnostics)

    if prior_attributes is None:
        typer.echo(f"🚀 Creating control plane {plan.name}...")
        result = resource.create(plan)
    else:
        prior = ControlPlaneModel.from_dict(prior_attributes)
        if resource.schema.replacement_paths(prior.to_dict(), plan.to_dict()):
            typer.echo(f"♻️  name changed, replacing control plane {prior.name}...")
            deleted = resource.delete(prior.name)
            if deleted.removed:
                registry.remove_entry(key)
            report(deleted.diagnostics)
            result = resource.create(plan)
        else:
            typer.echo(f"🔧 Updating control plane {plan.name}...")
            result = resource.update(plan, prior)

    if result.state is not None:
        registry.put_entry(key, result.state.to_dict())
        typer.echo(f"✅ Control plane {result.state.name} recorded as {key}")
    report(result.diagnostics)


@app.command("list")
def list_control_planes(ctx: typer.Context):
    """List all control planes in the project."""
    result = get_provider(ctx).data_source("eck_controlplanes").read()
    report(result.diagnostics)
    for control_plane in result.state.controlplanes:
        bundle = control_plane.applicationbundle
        upgrade = "auto-upgrade" if bundle.autoupgrade else "manual"
        typer.echo(f"{control_plane.name}: {bundle.version} ({upgrade})")


@app.command("get")
def get_control_plane(
    ctx: typer.Context,
    name: str = typer.Option(..., help="Control plane name"),
):
    """Show a control plane as reported by the ECK API."""
    resource = get_provider(ctx).resource(TYPE_NAME)
    result = resource.read(ControlPlaneModel(name=name, applicationbundle=ApplicationBundleModel("", False)))
    if result.removed:
        typer.echo(f"❌ Control plane '{name}' not found.", err=True)
        raise typer.Exit(code=1)
    report(result.diagnostics)
    echo_state(result.state)


@app.command("delete")
def delete_control_plane(
    ctx: typer.Context,
    file: Path = typer.Option(..., "--file", "-f", help="Control plane definition (YAML)"),
    address: Optional[str] = typer.Option(None, help="State address, defaults to the file name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete the control plane described by a definition."""
    key = state_address(TYPE_NAME, file, address)
    resource = get_provider(ctx).resource(TYPE_NAME)

    attributes = registry.get_entry(key)
    if attributes is not None:
        state = ControlPlaneModel.from_dict(attributes)
    else:
        state, diagnostics = resource.plan(load_definition(file))
        report(diagnostics)

    if not yes:
        confirm = typer.confirm(f"Are you sure you want to delete the control plane '{state.name}'?", default=False)
        if not confirm:
            typer.echo("❌ Deletion cancelled.")
            raise typer.Exit()

    result = resource.delete(state.name)
    if result.removed:
        registry.remove_entry(key)
        typer.echo(f"🗑️  Control plane {state.name} deleted.")
    report(result.diagnostics)
