from pathlib import Path
from typing import Optional

import typer

from eckprov import registry
from eckprov.commands import (
    cancel_on_interrupt,
    echo_state,
    get_provider,
    load_definition,
    report,
    state_address,
)
from eckprov.modules.models import ClusterModel
from eckprov.modules.wait import ReconciliationWaiter, ResourceIdentifier, WaitError

TYPE_NAME = "eck_cluster"

cluster_app = typer.Typer(help="Manage ECK clusters.")


@cluster_app.command("apply")
def apply_cluster(
    ctx: typer.Context,
    file: Path = typer.Option(..., "--file", "-f", help="Cluster definition (YAML)"),
    address: Optional[str] = typer.Option(None, help="State address, defaults to the file name"),
    wait: Optional[bool] = typer.Option(None, "--wait/--no-wait", help="Override the definition's wait flag"),
    interval: Optional[float] = typer.Option(None, help="Seconds between status polls"),
    timeout: Optional[float] = typer.Option(None, help="Seconds to wait for provisioning"),
):
    """Create, update or replace a cluster to match its definition."""
    config = load_definition(file)
    if wait is not None:
        config["wait"] = wait

    key = state_address(TYPE_NAME, file, address)
    prior_attributes = registry.get_entry(key)

    provider = get_provider(ctx)
    resource = provider.resource(TYPE_NAME, interval=interval, timeout=timeout)

    plan, diagnostics = resource.plan(config, prior_attributes)
    report(diagnostics)

    with cancel_on_interrupt() as token:
        if prior_attributes is None:
            typer.echo(f"🚀 Creating cluster {plan.identifier}...")
            result = resource.create(plan, token)
        else:
            prior = ClusterModel.from_dict(prior_attributes)
            changed = resource.schema.replacement_paths(prior.to_dict(), plan.to_dict())
            if changed:
                typer.echo(f"♻️  {', '.join(changed)} changed, replacing cluster {prior.identifier}...")
                deleted = resource.delete(prior.identifier)
                if deleted.removed:
                    registry.remove_entry(key)
                report(deleted.diagnostics)
                result = resource.create(plan, token)
            else:
                typer.echo(f"🔧 Updating cluster {plan.identifier}...")
                result = resource.update(plan, prior, token)

    if result.state is not None:
        registry.put_entry(key, result.state.to_dict())
        typer.echo(f"✅ Cluster {result.state.identifier} recorded as {key} (status: {result.state.status or 'unknown'})")
    report(result.diagnostics)


@cluster_app.command("get")
def get_cluster(
    ctx: typer.Context,
    eckcp: str = typer.Option("default", help="ECK control plane"),
    name: str = typer.Option(..., help="Cluster name"),
    show_sensitive: bool = typer.Option(False, help="Include the kubeconfig in the output"),
):
    """Show a cluster as reported by the ECK API."""
    provider = get_provider(ctx)
    result = provider.data_source(TYPE_NAME).read({"eckcp": eckcp, "name": name})
    report(result.diagnostics)
    echo_state(result.state, show_sensitive)


@cluster_app.command("wait")
def wait_cluster(
    ctx: typer.Context,
    eckcp: str = typer.Option("default", help="ECK control plane"),
    name: str = typer.Option(..., help="Cluster name"),
    interval: Optional[float] = typer.Option(None, help="Seconds between status polls"),
    timeout: Optional[float] = typer.Option(None, help="Seconds to wait for provisioning"),
):
    """Block until a cluster is provisioned."""
    provider = get_provider(ctx)
    try:
        waiter = ReconciliationWaiter(provider.client.get_cluster, interval=interval, timeout=timeout)
    except ValueError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)
    identifier = ResourceIdentifier(control_plane=eckcp, name=name)

    with cancel_on_interrupt() as token:
        try:
            outcome = waiter.wait(identifier, token)
        except WaitError as e:
            typer.echo(f"❌ {e}", err=True)
            raise typer.Exit(code=1)

    typer.echo(f"✅ Cluster {identifier} is {outcome.status} after {outcome.polls} poll(s)")


@cluster_app.command("delete")
def delete_cluster(
    ctx: typer.Context,
    file: Path = typer.Option(..., "--file", "-f", help="Cluster definition (YAML)"),
    address: Optional[str] = typer.Option(None, help="State address, defaults to the file name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete the cluster described by a definition."""
    key = state_address(TYPE_NAME, file, address)
    provider = get_provider(ctx)
    resource = provider.resource(TYPE_NAME)

    attributes = registry.get_entry(key)
    if attributes is not None:
        state = ClusterModel.from_dict(attributes)
    else:
        state, diagnostics = resource.plan(load_definition(file))
        report(diagnostics)

    if not yes:
        confirm = typer.confirm(f"Are you sure you want to delete the cluster '{state.identifier}'?", default=False)
        if not confirm:
            typer.echo("❌ Deletion cancelled.")
            raise typer.Exit()

    result = resource.delete(state.identifier)
    if result.removed:
        registry.remove_entry(key)
        typer.echo(f"🗑️  Cluster {state.identifier} deleted.")
    report(result.diagnostics)


app = cluster_app
