class ExporterError(Exception):
    """Base exception for metrics-server-exporter."""

    pass


class ConnectivityError(ExporterError):
    """Raised when the cluster API is unreachable, errors out or a scrape deadline expires."""

    pass


class DiscoveryError(ExporterError):
    """Raised when the usage-metrics API group is absent or its version is malformed."""

    pass


class DecodeError(ExporterError):
    """Raised (or returned) when a single schema-less object does not match the expected shape."""

    pass


class ConfigurationError(ExporterError):
    """Raised when intervals, timeouts or other options are invalid."""

    pass
