# src/metrics_server_exporter/api/dependencies.py
"""
FastAPI dependency injection functions for the registry and the scheduler.
"""

from typing import Optional

from fastapi import Request

from ..core.scheduler import Scheduler
from ..metrics.registry import MetricRegistry
from ..metrics.registry import registry as default_registry


async def get_registry() -> MetricRegistry:
    """Provides the process-wide MetricRegistry."""
    return default_registry


async def get_scheduler(request: Request) -> Optional[Scheduler]:
    """Provides the scheduler started by the application lifespan, if any."""
    return getattr(request.app.state, "scheduler", None)
