# tests/api/test_exporter_api.py
"""Tests for the /metrics and /ready endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from metrics_server_exporter.api.app import create_app
from metrics_server_exporter.core.config import build_options
from metrics_server_exporter.core.exceptions import DiscoveryError
from metrics_server_exporter.models.usage import Resource


class TestMetricsEndpoint:
    def test_metrics_returns_prometheus_text(self, client, metric_registry):
        metric_registry.set_node_capacity("worker-1", Resource.CPU, 2000)

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert 'metrics_server_exporter_node_resource_capacity{node="worker-1",resource="cpu"} 2000.0' in response.text


class TestReadyEndpoint:
    def test_ready_after_initial_scrape(self, client):
        response = client.get("/ready")
        assert response.status_code == 204
        assert response.content == b""

    def test_not_ready_before_initial_scrape(self, client, scheduler):
        scheduler.ready = False
        response = client.get("/ready")
        assert response.status_code == 503

    def test_not_ready_without_scheduler(self):
        app = create_app()
        with TestClient(app) as c:
            assert c.get("/ready").status_code == 503


class TestLifespan:
    def test_lifespan_starts_and_stops_scheduler(self):
        api_client = MagicMock()
        api_client.close = AsyncMock()
        scheduler = MagicMock()
        scheduler.start = AsyncMock()
        scheduler.stop = AsyncMock()
        scheduler.ready = True
        options = build_options(metrics_scrape_interval="15s")

        get_client = AsyncMock(return_value=api_client)

        with (
            patch("metrics_server_exporter.api.app.get_api_client", new=get_client),
            patch("metrics_server_exporter.api.app.build_scheduler", return_value=scheduler) as build,
        ):
            app = create_app(options=options, in_cluster=False, kubeconfig="/tmp/kubeconfig", use_lifespan=True)
            with TestClient(app) as c:
                assert c.get("/ready").status_code == 204

        get_client.assert_awaited_once_with(in_cluster=False, kubeconfig="/tmp/kubeconfig")
        build.assert_called_once_with(api_client, options)
        scheduler.start.assert_awaited_once()
        scheduler.stop.assert_awaited_once()
        api_client.close.assert_awaited_once()

    def test_lifespan_fails_when_initial_scrape_fails(self):
        api_client = MagicMock()
        api_client.close = AsyncMock()
        scheduler = MagicMock()
        scheduler.start = AsyncMock(side_effect=DiscoveryError("metrics.k8s.io is not served"))
        scheduler.stop = AsyncMock()

        with (
            patch("metrics_server_exporter.api.app.get_api_client", new=AsyncMock(return_value=api_client)),
            patch("metrics_server_exporter.api.app.build_scheduler", return_value=scheduler),
        ):
            app = create_app(use_lifespan=True)
            with pytest.raises(DiscoveryError):
                with TestClient(app):
                    pass

        api_client.close.assert_awaited_once()
