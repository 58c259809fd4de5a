# src/metrics_server_exporter/cli/__init__.py
"""
metrics-server-exporter CLI package. Exposes the Typer `app` used by the
console entrypoint.
"""

from .main import app

__all__ = ["app"]
