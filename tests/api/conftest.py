# tests/api/conftest.py
"""
Shared fixtures for API tests.
Uses FastAPI's TestClient with dependency overrides to inject the registry and scheduler.
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from metrics_server_exporter.api.app import create_app
from metrics_server_exporter.api.dependencies import get_registry, get_scheduler


@pytest.fixture
def scheduler():
    """A scheduler stand-in that has completed its initial scrape."""
    scheduler = MagicMock()
    scheduler.ready = True
    return scheduler


@pytest.fixture
def client(metric_registry, scheduler):
    """Creates a TestClient with the registry and scheduler injected."""
    app = create_app()
    app.dependency_overrides[get_registry] = lambda: metric_registry
    app.dependency_overrides[get_scheduler] = lambda: scheduler
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
