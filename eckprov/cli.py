import logging
import sys
from typing import Optional

import typer

from eckprov.commands import cluster, controlplane, kubeconfig
from eckprov.logging import setup_logger

app = typer.Typer(help="Declarative management of ECK control planes and clusters.")

# Global debug flag
debug_mode = False

# Add all command groups
app.add_typer(controlplane.app, name="controlplane")
app.add_typer(cluster.app, name="cluster")
app.add_typer(kubeconfig.app, name="kubeconfig")


# Global options callback
@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
    host: Optional[str] = typer.Option(None, help="ECK API URL, defaults to $ECK_HOST"),
    username: Optional[str] = typer.Option(None, help="ECK username, defaults to $ECK_USERNAME"),
    password: Optional[str] = typer.Option(None, help="ECK password, defaults to $ECK_PASSWORD"),
    project: Optional[str] = typer.Option(None, help="OpenStack project UUID, defaults to $ECK_PROJECT"),
    insecure: Optional[bool] = typer.Option(None, "--insecure/--verify", help="Skip TLS verification"),
):
    """eckprov - ECK infrastructure management CLI."""
    global debug_mode
    debug_mode = debug
    setup_logger("eckprov", debug=debug)
    if debug:
        logging.getLogger("eckprov").debug("Debug mode enabled")

    ctx.obj = {
        "credentials": {
            "host": host,
            "username": username,
            "password": password,
            "project": project,
            "insecure": insecure,
        },
    }


if __name__ == "__main__":
    try:
        app()
    except Exception as e:
        if debug_mode:
            import traceback
            logging.error(f"Unhandled exception: {e}\n{traceback.format_exc()}")
        else:
            logging.error(f"Error: {e}")
        sys.exit(1)
