# src/metrics_server_exporter/cli/main.py
"""
This module is the main entry point for the metrics-server-exporter CLI.
"""

import logging
from typing import List, Optional

import typer
import uvicorn
from typing_extensions import Annotated

from ..core.config import Config, config
from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


app = typer.Typer(
    name="metrics-server-exporter",
    help="Export Kubernetes node capacity and metrics-server usage as Prometheus metrics.",
    add_completion=False,
)


def version_callback(value: bool):
    """
    Prints the version of metrics-server-exporter.
    """
    if value:
        from .. import __version__

        typer.echo(f"metrics-server-exporter version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
):
    """
    metrics-server-exporter CLI main entry point.
    """
    pass


@app.command()
def version():
    """
    Show the version of metrics-server-exporter.
    """
    from .. import __version__

    typer.echo(f"metrics-server-exporter version: {__version__}")


@app.command()
def start(
    in_cluster: Annotated[
        bool, typer.Option("--in-cluster/--no-in-cluster", help="Run with kubernetes in-cluster config.")
    ] = config.KUBE_IN_CLUSTER,
    kubeconfig: Annotated[
        Optional[str], typer.Option("--kubeconfig", help="Path to a kubeconfig file (out-of-cluster).")
    ] = config.KUBECONFIG,
    node_scrape_interval: Annotated[
        str, typer.Option("--node-scrape-interval", help="How often node capacity is read (e.g. '1h').")
    ] = config.NODE_SCRAPE_INTERVAL,
    metrics_scrape_interval: Annotated[
        str, typer.Option("--metrics-scrape-interval", help="How often metrics-server is read (e.g. '30s').")
    ] = config.METRICS_SCRAPE_INTERVAL,
    scrape_timeout: Annotated[
        str, typer.Option("--scrape-timeout", help="Deadline of a single scrape (e.g. '10s').")
    ] = config.SCRAPE_TIMEOUT,
    exclude_namespace: Annotated[
        Optional[List[str]],
        typer.Option("--exclude-namespace", help="Namespace to exclude from pod usage (repeatable)."),
    ] = None,
    host: Annotated[str, typer.Option("--host", help="Address to listen on.")] = config.API_HOST,
    port: Annotated[int, typer.Option("--port", help="Port to listen on.")] = config.API_PORT,
    log_level: Annotated[str, typer.Option("--log-level", help="Logging level.")] = config.LOG_LEVEL,
) -> None:
    """
    Run the initial scrape, then serve /metrics and /ready while scraping periodically.
    """
    # Flags default to the environment, so they are applied on top of a fresh Config.
    settings = Config()
    settings.LOG_LEVEL = log_level.upper()
    settings.NODE_SCRAPE_INTERVAL = node_scrape_interval
    settings.METRICS_SCRAPE_INTERVAL = metrics_scrape_interval
    settings.SCRAPE_TIMEOUT = scrape_timeout
    if exclude_namespace:
        settings.EXCLUDED_NAMESPACES = ",".join(exclude_namespace)
    settings.API_PORT = port

    try:
        settings.validate_instance()
        options = settings.to_options()
    except ConfigurationError as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(code=1)

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    from ..api.app import create_app

    logger.info("Starting metrics-server-exporter on %s:%d", host, port)
    exporter_app = create_app(options=options, in_cluster=in_cluster, kubeconfig=kubeconfig, use_lifespan=True)
    # uvicorn handles SIGINT/SIGTERM and runs the lifespan shutdown that stops the scheduler.
    uvicorn.run(exporter_app, host=host, port=port, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    app()
