# src/metrics_server_exporter/collectors/capacity_collector.py
"""
Collects the allocatable CPU and memory of every node from the Kubernetes API
and publishes it as the node capacity gauges.
"""

import logging
from typing import List

from kubernetes_asyncio import client

from ..models.usage import NodeCapacitySample, Resource, scale
from .base_collector import BaseCollector, connectivity_errors

logger = logging.getLogger(__name__)


class CapacityCollector(BaseCollector):
    """Lists all nodes and exports their allocatable resources."""

    def _samples_for(self, node) -> List[NodeCapacitySample]:
        node_name = node.metadata.name
        allocatable = (node.status.allocatable if node.status else None) or {}
        return [
            NodeCapacitySample(
                node=node_name,
                resource=resource,
                value=scale(resource, allocatable.get(resource.value, 0)),
            )
            for resource in Resource
        ]

    async def collect(self) -> None:
        api_client = await self._ensure_client()

        with connectivity_errors("list nodes"):
            nodes = await client.CoreV1Api(api_client).list_node(watch=False)

        published = 0
        for node in nodes.items or []:
            try:
                samples = self._samples_for(node)
            except ValueError as e:
                logger.error("Skipping node '%s': invalid allocatable quantity: %s", node.metadata.name, e)
                continue

            for sample in samples:
                self.registry.set_node_capacity(sample.node, sample.resource, sample.value)
            published += 1

        if not published:
            logger.warning("No nodes found in the cluster.")
        logger.debug("Published capacity for %d node(s).", published)
