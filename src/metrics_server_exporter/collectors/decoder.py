# src/metrics_server_exporter/collectors/decoder.py
"""
Converts schema-less metrics.k8s.io objects (plain dicts returned by the
custom objects API) into the typed usage shapes.

Decoding never raises: each object yields a DecodeResult carrying either the
decoded value or the DecodeError explaining why it was rejected, so callers
can skip a single malformed object and keep going.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from ..core.exceptions import DecodeError
from ..models.usage import NodeUsage, PodUsage

UsageObject = Union[NodeUsage, PodUsage]


@dataclass(frozen=True)
class DecodeResult:
    value: Optional[UsageObject] = None
    error: Optional[DecodeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _fail(message: str) -> DecodeResult:
    return DecodeResult(error=DecodeError(message))


def decode_usage_object(obj: Any, namespaced: bool) -> DecodeResult:
    """
    Interpret a generic key-value document as PodUsage (namespaced kinds) or
    NodeUsage (cluster-scoped kinds).
    """
    if not isinstance(obj, Mapping):
        return _fail(f"expected an object, got {type(obj).__name__}")

    metadata = obj.get("metadata")
    if not isinstance(metadata, Mapping):
        return _fail("object has no metadata")

    name = metadata.get("name")
    if not isinstance(name, str) or not name:
        return _fail("object metadata has no name")

    try:
        if namespaced:
            namespace = metadata.get("namespace")
            if not isinstance(namespace, str) or not namespace:
                return _fail(f"object '{name}' has no namespace")
            value = PodUsage.model_validate(
                {"name": name, "namespace": namespace, "containers": obj.get("containers")}
            )
        else:
            value = NodeUsage.model_validate({"name": name, "usage": obj.get("usage")})
    except ValidationError as e:
        return _fail(f"conversion of '{name}' failed: {e.error_count()} error(s): {e.errors()[0]['msg']}")

    return DecodeResult(value=value)
