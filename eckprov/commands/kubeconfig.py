from typing import Optional

import typer

from eckprov.commands import get_provider, report
from eckprov.utils.kube import check_kubeconfig, write_kubeconfig

app = typer.Typer(help="Fetch cluster kubeconfigs.")


@app.command("get")
def get_kubeconfig(
    ctx: typer.Context,
    eckcp: str = typer.Option("default", help="ECK control plane"),
    cluster: str = typer.Option(..., help="Cluster name"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write the kubeconfig to this path"),
    check: bool = typer.Option(False, help="Connect to the cluster and list its nodes"),
):
    """Print or save the kubeconfig of a provisioned cluster."""
    result = get_provider(ctx).data_source("eck_kubeconfig").read({"eckcp": eckcp, "cluster": cluster})
    report(result.diagnostics)
    kubeconfig = result.state.kubeconfig

    if output is None:
        if check:
            typer.echo("❌ --check needs --output", err=True)
            raise typer.Exit(code=1)
        typer.echo(kubeconfig)
        return

    path = write_kubeconfig(kubeconfig, output)
    typer.echo(f"✅ Kubeconfig written to {path}")

    if check:
        try:
            nodes = check_kubeconfig(path)
        except Exception as e:
            typer.echo(f"❌ Kubernetes API not reachable: {e}", err=True)
            raise typer.Exit(code=1)
        typer.echo(f"✅ Kubernetes API reachable, {nodes} node(s)")
