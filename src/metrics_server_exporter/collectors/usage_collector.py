# src/metrics_server_exporter/collectors/usage_collector.py
"""
Scrapes live node and pod usage from the metrics API (metrics.k8s.io).

The group/version and its resource kinds are discovered on every cycle, then
every kind is listed as schema-less objects and decoded item by item:
namespaced kinds as pod usage, cluster-scoped kinds as node usage.
"""

import logging
from typing import Iterable, List, Optional

from kubernetes_asyncio import client

from ..metrics.registry import MetricRegistry
from ..models.usage import (
    DiscoveredResourceKind,
    GroupVersion,
    NodeUsage,
    NodeUsageSample,
    PodUsage,
    PodUsageSample,
    Resource,
)
from .base_collector import BaseCollector, connectivity_errors
from .decoder import decode_usage_object
from .discovery import METRICS_GROUP_NAME, UsageApiDiscovery

logger = logging.getLogger(__name__)


def node_usage_samples(usage: NodeUsage) -> List[NodeUsageSample]:
    return [NodeUsageSample(node=usage.name, resource=r, value=usage.value_of(r)) for r in Resource]


def pod_usage_samples(usage: PodUsage) -> List[PodUsageSample]:
    """One sample per container per resource, in container order."""
    return [
        PodUsageSample(namespace=usage.namespace, pod=usage.name, resource=r, value=container.value_of(r))
        for container in usage.containers
        for r in Resource
    ]


class UsageCollector(BaseCollector):
    """
    Discovers the metrics API and exports node and pod usage gauges.
    """

    def __init__(
        self,
        api_client: Optional[client.ApiClient] = None,
        registry: Optional[MetricRegistry] = None,
        excluded_namespaces: Iterable[str] = (),
        group_name: str = METRICS_GROUP_NAME,
    ):
        super().__init__(api_client=api_client, registry=registry)
        self.excluded_namespaces = frozenset(excluded_namespaces)
        self.group_name = group_name

    async def collect(self) -> None:
        """
        Raises:
            DiscoveryError: If the metrics API group is not served or malformed.
            ConnectivityError: If a discovery or list call fails. Kinds processed
                before the failure keep their published values.
        """
        api_client = await self._ensure_client()
        group_version, kinds = await UsageApiDiscovery(api_client, self.group_name).discover()

        for kind in kinds:
            await self._collect_kind(api_client, group_version, kind)

    async def _list_items(self, api_client: client.ApiClient, group_version: GroupVersion, kind) -> list:
        api = client.CustomObjectsApi(api_client)
        with connectivity_errors(f"list {kind.name}.{group_version}"):
            # Without a namespace the list spans every namespace for namespaced kinds.
            result = await api.list_cluster_custom_object(group_version.group, group_version.version, kind.name)
        items = result.get("items") if isinstance(result, dict) else None
        return items or []

    async def _collect_kind(
        self, api_client: client.ApiClient, group_version: GroupVersion, kind: DiscoveredResourceKind
    ) -> None:
        items = await self._list_items(api_client, group_version, kind)

        published = skipped = 0
        for item in items:
            result = decode_usage_object(item, kind.namespaced)
            if not result.ok:
                logger.error("Skipping %s object: %s", kind.name, result.error)
                skipped += 1
                continue

            if kind.namespaced:
                if result.value.namespace in self.excluded_namespaces:
                    continue
                for sample in pod_usage_samples(result.value):
                    self.registry.set_pod_usage(sample.namespace, sample.pod, sample.resource, sample.value)
            else:
                for sample in node_usage_samples(result.value):
                    self.registry.set_node_usage(sample.node, sample.resource, sample.value)
            published += 1

        logger.debug("Published usage for %d %s (%d skipped).", published, kind.name, skipped)
