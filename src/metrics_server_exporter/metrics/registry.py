# src/metrics_server_exporter/metrics/registry.py
"""Prometheus gauge definitions exported by metrics-server-exporter."""

from typing import Optional

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from ..models.usage import Resource

METRICS_NAMESPACE = "metrics_server_exporter"


class MetricRegistry:
    """
    Process-wide set of labeled gauges. Writes only: values are read back by
    the Prometheus text exposition (see render()).
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()
        self.node_resource_usage = Gauge(
            "resource_usage",
            "Current resource usage of a node as reported by metrics-server.",
            labelnames=("node", "resource"),
            namespace=METRICS_NAMESPACE,
            subsystem="node",
            registry=self.registry,
        )
        self.node_resource_capacity = Gauge(
            "resource_capacity",
            "Allocatable resources of a node.",
            labelnames=("node", "resource"),
            namespace=METRICS_NAMESPACE,
            subsystem="node",
            registry=self.registry,
        )
        self.pod_resource_usage = Gauge(
            "resource_usage",
            "Current resource usage of a pod as reported by metrics-server.",
            labelnames=("namespace", "pod", "resource"),
            namespace=METRICS_NAMESPACE,
            subsystem="pod",
            registry=self.registry,
        )

    def set_node_usage(self, node: str, resource: Resource, value: float) -> None:
        """Sets the resource usage metric for the given node and compute resource."""
        self.node_resource_usage.labels(node=node, resource=Resource(resource).value).set(value)

    def set_node_capacity(self, node: str, resource: Resource, value: float) -> None:
        """Sets the allocatable capacity metric for a node and compute resource."""
        self.node_resource_capacity.labels(node=node, resource=Resource(resource).value).set(value)

    def set_pod_usage(self, namespace: str, pod: str, resource: Resource, value: float) -> None:
        """Sets the resource usage metric for the given namespace/pod combination."""
        self.pod_resource_usage.labels(namespace=namespace, pod=pod, resource=Resource(resource).value).set(value)

    def render(self) -> bytes:
        """Current registry state in the Prometheus text exposition format."""
        return generate_latest(self.registry)


# Instantiate the registry to be shared by the collectors and the HTTP layer
registry = MetricRegistry()
