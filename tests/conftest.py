# tests/conftest.py

from typing import Dict, List, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from kubernetes_asyncio.client import models as k8s
from prometheus_client import CollectorRegistry

from metrics_server_exporter.metrics.registry import MetricRegistry


class FakeCluster:
    """
    In-memory stand-in for the Kubernetes API used by the collectors.

    Node capacity is served through CoreV1Api.list_node, discovery through
    ApisApi.get_api_versions and ApiClient.call_api, and the schema-less
    usage objects through CustomObjectsApi.list_cluster_custom_object.
    """

    def __init__(self):
        self.nodes: List[k8s.V1Node] = []
        self.metrics_group_version: Optional[str] = "metrics.k8s.io/v1beta1"
        self.resources: List[Tuple[str, bool]] = [("nodes", False), ("pods", True)]
        self.objects: Dict[str, list] = {"nodes": [], "pods": []}
        self.list_errors: Dict[str, Exception] = {}

        self.api_client = MagicMock()
        self.api_client.call_api = AsyncMock(side_effect=self._api_resources)
        self.api_client.close = AsyncMock()

        self.core_api = MagicMock()
        self.core_api.list_node = AsyncMock(side_effect=self._list_node)

        self.apis_api = MagicMock()
        self.apis_api.get_api_versions = AsyncMock(side_effect=self._api_groups)

        self.custom_api = MagicMock()
        self.custom_api.list_cluster_custom_object = AsyncMock(side_effect=self._list_objects)

    # --- builders ---

    def add_node(self, name, cpu="2", memory="4Gi"):
        allocatable = {}
        if cpu is not None:
            allocatable["cpu"] = cpu
        if memory is not None:
            allocatable["memory"] = memory
        self.nodes.append(
            k8s.V1Node(
                metadata=k8s.V1ObjectMeta(name=name),
                status=k8s.V1NodeStatus(allocatable=allocatable, capacity=dict(allocatable)),
            )
        )

    def add_node_usage(self, name, cpu="250m", memory="1Gi"):
        self.objects["nodes"].append(
            {
                "kind": "NodeMetrics",
                "apiVersion": "metrics.k8s.io/v1beta1",
                "metadata": {"name": name},
                "timestamp": "2026-10-19T10:00:00Z",
                "window": "20s",
                "usage": {"cpu": cpu, "memory": memory},
            }
        )

    def add_pod_usage(self, namespace, name, containers):
        self.objects["pods"].append(
            {
                "kind": "PodMetrics",
                "apiVersion": "metrics.k8s.io/v1beta1",
                "metadata": {"name": name, "namespace": namespace},
                "timestamp": "2026-10-19T10:00:00Z",
                "window": "20s",
                "containers": [
                    {"name": c_name, "usage": {"cpu": cpu, "memory": memory}} for c_name, cpu, memory in containers
                ],
            }
        )

    # --- fake API endpoints ---

    async def _list_node(self, **kwargs):
        if "nodes/core" in self.list_errors:
            raise self.list_errors["nodes/core"]
        return k8s.V1NodeList(items=list(self.nodes))

    async def _api_groups(self, **kwargs):
        groups = [
            k8s.V1APIGroup(
                name="apps",
                versions=[k8s.V1GroupVersionForDiscovery(group_version="apps/v1", version="v1")],
                preferred_version=k8s.V1GroupVersionForDiscovery(group_version="apps/v1", version="v1"),
            )
        ]
        if self.metrics_group_version is not None:
            discovered = k8s.V1GroupVersionForDiscovery(group_version=self.metrics_group_version, version="v1beta1")
            groups.append(k8s.V1APIGroup(name="metrics.k8s.io", versions=[discovered], preferred_version=discovered))
        return k8s.V1APIGroupList(groups=groups)

    async def _api_resources(self, path, method, path_params=None, response_types_map=None, **kwargs):
        assert response_types_map == {200: "V1APIResourceList"}
        if "discovery" in self.list_errors:
            raise self.list_errors["discovery"]
        return k8s.V1APIResourceList(
            group_version=self.metrics_group_version,
            resources=[
                k8s.V1APIResource(
                    name=name,
                    namespaced=namespaced,
                    kind="NodeMetrics" if name == "nodes" else "PodMetrics",
                    singular_name="",
                    verbs=["get", "list"],
                )
                for name, namespaced in self.resources
            ],
        )

    async def _list_objects(self, group, version, plural, **kwargs):
        if plural in self.list_errors:
            raise self.list_errors[plural]
        return {
            "kind": "List",
            "apiVersion": f"{group}/{version}",
            "metadata": {},
            "items": list(self.objects.get(plural, [])),
        }


@pytest.fixture
def fake_cluster():
    """Patches the kubernetes_asyncio API classes with a FakeCluster."""
    cluster = FakeCluster()
    with (
        patch("kubernetes_asyncio.client.CoreV1Api", return_value=cluster.core_api),
        patch("kubernetes_asyncio.client.ApisApi", return_value=cluster.apis_api),
        patch("kubernetes_asyncio.client.CustomObjectsApi", return_value=cluster.custom_api),
    ):
        yield cluster


@pytest.fixture
def metric_registry():
    """A MetricRegistry backed by a fresh CollectorRegistry, isolated per test."""
    return MetricRegistry(CollectorRegistry())


@pytest.fixture
def read_gauge(metric_registry):
    """Reads back a gauge value, or None when the label set was never written."""

    def _read(name: str, **labels) -> Optional[float]:
        return metric_registry.registry.get_sample_value(f"metrics_server_exporter_{name}", labels)

    return _read
