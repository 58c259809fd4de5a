# src/metrics_server_exporter/api/app.py
"""
FastAPI application factory serving /metrics and /ready.

With lifespan management the app loads the Kubernetes configuration, runs
the initial scrapes and keeps the scheduler running until shutdown. Tests
create the app without lifespan and inject a scheduler or registry.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Response, status
from prometheus_client import CONTENT_TYPE_LATEST

from metrics_server_exporter import __version__

from ..core.config import ExporterOptions
from ..core.exceptions import ConnectivityError
from ..core.factory import build_scheduler
from ..core.k8s_client import get_api_client
from ..core.scheduler import Scheduler
from ..metrics.registry import MetricRegistry
from .dependencies import get_registry, get_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the initial scrape before serving and stop scraping on shutdown."""
    settings = app.state.settings
    api_client = await get_api_client(in_cluster=settings["in_cluster"], kubeconfig=settings["kubeconfig"])
    if api_client is None:
        raise ConnectivityError("Kubernetes configuration could not be loaded")

    scheduler = build_scheduler(api_client, settings["options"])
    try:
        logger.info("Running initial scrape of nodes and metrics server...")
        await scheduler.start()
        app.state.scheduler = scheduler
        logger.info("Initial scrape complete.")
        yield
    finally:
        await scheduler.stop()
        await api_client.close()
        logger.info("Kubernetes client closed.")


def create_app(
    options: Optional[ExporterOptions] = None,
    in_cluster: bool = True,
    kubeconfig: Optional[str] = None,
    use_lifespan: bool = False,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        options: Scrape intervals, timeout and excluded namespaces.
        in_cluster: Try the in-cluster configuration before the kubeconfig.
        kubeconfig: Path of the kubeconfig file, default location when None.
        use_lifespan: If True, attach the lifespan handler that starts the
                      scheduler. Set to False for testing.
    """
    app = FastAPI(
        title="metrics-server-exporter",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan if use_lifespan else None,
    )
    app.state.settings = {
        "options": options or ExporterOptions(),
        "in_cluster": in_cluster,
        "kubeconfig": kubeconfig,
    }
    app.state.scheduler = None

    @app.get("/metrics")
    async def metrics(registry: MetricRegistry = Depends(get_registry)):
        return Response(content=registry.render(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/ready", status_code=status.HTTP_204_NO_CONTENT)
    async def ready(scheduler: Optional[Scheduler] = Depends(get_scheduler)):
        if scheduler is None or not scheduler.ready:
            return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app
