# src/metrics_server_exporter/collectors/base_collector.py
"""
This module defines the abstract base class for the scrapers. Each collector
reads from the Kubernetes API and publishes into the MetricRegistry.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Optional

import aiohttp
from kubernetes_asyncio import client
from kubernetes_asyncio.client.rest import ApiException

from ..core.exceptions import ConnectivityError
from ..core.k8s_client import get_api_client
from ..metrics.registry import MetricRegistry
from ..metrics.registry import registry as default_registry

logger = logging.getLogger(__name__)


@contextmanager
def connectivity_errors(action: str):
    """Translates Kubernetes client and transport failures into ConnectivityError."""
    try:
        yield
    except ApiException as e:
        raise ConnectivityError(f"{action}: API returned {e.status} {e.reason}") from e
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise ConnectivityError(f"{action}: {e!r}") from e


class BaseCollector(ABC):
    """
    Abstract Base Class for the capacity and usage scrapers.
    """

    def __init__(
        self,
        api_client: Optional[client.ApiClient] = None,
        registry: Optional[MetricRegistry] = None,
    ):
        self._api_client = api_client
        self.registry = registry if registry is not None else default_registry

    async def _ensure_client(self) -> client.ApiClient:
        """Lazily initialize the Kubernetes client using the centralized loader."""
        if self._api_client is None:
            self._api_client = await get_api_client()
            if self._api_client is None:
                raise ConnectivityError("Kubernetes configuration could not be loaded")
        return self._api_client

    @abstractmethod
    async def collect(self) -> None:
        """
        Scrape the cluster once and publish the samples into the registry.

        Raises:
            ConnectivityError: If a list call fails; nothing further is published.
        """
        pass

    async def close(self):
        """Close the Kubernetes API client if it exists."""
        if self._api_client is not None:
            await self._api_client.close()
            logger.debug("%s Kubernetes client closed.", type(self).__name__)
            self._api_client = None
