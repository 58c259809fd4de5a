# src/metrics_server_exporter/models/usage.py
"""
Pydantic models for the samples published by the exporter and for the
shapes decoded from the schema-less metrics.k8s.io objects.

CPU values are milli-units (1000 == one core). Memory values are kilo-units
(1000-based) for node capacity, node usage and pod usage alike.
"""

from decimal import Decimal
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.k8s_utils import kilo_value, milli_value, parse_quantity


class Resource(str, Enum):
    """Compute resources exported by the gauges."""

    CPU = "cpu"
    MEMORY = "memory"


def scale(resource: Resource, quantity) -> float:
    """Scales a quantity to the exported unit for the given resource."""
    if resource is Resource.CPU:
        return float(milli_value(quantity))
    return float(kilo_value(quantity))


class NodeCapacitySample(BaseModel):
    """Allocatable capacity of one resource on one node."""

    node: str = Field(..., description="The name of the Kubernetes node.")
    resource: Resource = Field(..., description="The compute resource.")
    value: float = Field(..., description="CPU in milli-units or memory in kilo-units.")


class NodeUsageSample(BaseModel):
    """Live usage of one resource on one node, as reported by metrics-server."""

    node: str = Field(..., description="The name of the Kubernetes node.")
    resource: Resource = Field(..., description="The compute resource.")
    value: float = Field(..., description="CPU in milli-units or memory in kilo-units.")


class PodUsageSample(BaseModel):
    """Live usage of one resource for one container of a pod."""

    namespace: str = Field(..., description="The namespace the pod belongs to.")
    pod: str = Field(..., description="The name of the Kubernetes pod.")
    resource: Resource = Field(..., description="The compute resource.")
    value: float = Field(..., description="CPU in milli-units or memory in kilo-units.")


class GroupVersion(BaseModel):
    """An API group/version pair such as metrics.k8s.io/v1beta1."""

    model_config = ConfigDict(frozen=True)

    group: str = ""
    version: str

    def __str__(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"


class DiscoveredResourceKind(BaseModel):
    """A resource kind served under the discovered group/version."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Plural resource name, e.g. 'nodes' or 'pods'.")
    namespaced: bool = Field(False, description="Whether instances live in a namespace.")


class ResourceUsage(BaseModel):
    """A resource list ({"cpu": "250m", "memory": "64Mi"}) with parsed quantities."""

    model_config = ConfigDict(extra="ignore")

    usage: Dict[str, Decimal] = Field(default_factory=dict)

    @field_validator("usage", mode="before")
    @classmethod
    def _parse_quantities(cls, value):
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("usage must be a mapping of resource name to quantity")
        return {str(k): parse_quantity(v) for k, v in value.items()}

    def value_of(self, resource: Resource) -> float:
        # A missing resource is a zero quantity.
        return scale(resource, self.usage.get(resource.value, Decimal(0)))


class ContainerUsage(ResourceUsage):
    name: str = ""


class NodeUsage(ResourceUsage):
    """Decoded cluster-scoped usage object (NodeMetrics)."""

    name: str


class PodUsage(BaseModel):
    """Decoded namespaced usage object (PodMetrics)."""

    model_config = ConfigDict(extra="ignore")

    name: str
    namespace: str
    containers: List[ContainerUsage] = Field(default_factory=list)

    @field_validator("containers", mode="before")
    @classmethod
    def _null_containers(cls, value):
        return [] if value is None else value
