# src/metrics_server_exporter/core/factory.py
"""
Factory functions wiring the collectors and the scheduler together.
"""

import logging
from typing import Optional

from kubernetes_asyncio import client

from ..collectors.capacity_collector import CapacityCollector
from ..collectors.usage_collector import UsageCollector
from ..metrics.registry import MetricRegistry
from .config import ExporterOptions
from .scheduler import Scheduler

logger = logging.getLogger(__name__)


def build_scheduler(
    api_client: client.ApiClient,
    options: ExporterOptions,
    registry: Optional[MetricRegistry] = None,
) -> Scheduler:
    """Creates a Scheduler whose jobs scrape node capacity and metrics-server usage into ``registry``."""
    capacity = CapacityCollector(api_client=api_client, registry=registry)
    usage = UsageCollector(
        api_client=api_client,
        registry=registry,
        excluded_namespaces=options.excluded_namespaces,
    )
    if options.excluded_namespaces:
        logger.info("Excluding namespaces from pod usage: %s", ", ".join(sorted(options.excluded_namespaces)))
    return Scheduler(capacity.collect, usage.collect, options=options)
