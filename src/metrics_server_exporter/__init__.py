"""metrics-server-exporter: Kubernetes capacity and usage as Prometheus gauges."""

__version__ = "0.1.0"
