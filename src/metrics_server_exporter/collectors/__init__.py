from .capacity_collector import CapacityCollector
from .discovery import UsageApiDiscovery
from .usage_collector import UsageCollector

__all__ = [
    "CapacityCollector",
    "UsageApiDiscovery",
    "UsageCollector",
]
