# src/metrics_server_exporter/core/config.py

import logging
import os
import re
from datetime import timedelta
from typing import FrozenSet, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .exceptions import ConfigurationError

# Load environment variables from a .env file located in the project root
dotenv_path = os.path.join(os.path.dirname(__file__), "..", "..", "..", ".env")
load_dotenv(dotenv_path=dotenv_path)

logger = logging.getLogger(__name__)

_DURATION_RE = re.compile(r"^(\d+)([smh])$")
_DURATION_MULTIPLIERS = {"s": 1, "m": 60, "h": 3600}

DEFAULT_NODE_SCRAPE_INTERVAL = "1h"
DEFAULT_METRICS_SCRAPE_INTERVAL = "30s"
DEFAULT_SCRAPE_TIMEOUT = "10s"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_duration(value) -> float:
    """
    Converts a Prometheus-style duration string like '30s', '5m' or '1h' to seconds.
    Numbers are taken as seconds and timedeltas are converted as-is.

    Raises:
        ConfigurationError: If the value cannot be interpreted as a duration.
    """
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        match = _DURATION_RE.match(value.strip().lower())
        if match:
            amount, unit = int(match.group(1)), match.group(2)
            return float(amount * _DURATION_MULTIPLIERS[unit])
    raise ConfigurationError(f"Invalid duration format: '{value}'. Use 's', 'm', or 'h'.")


def _split_namespaces(raw: Optional[str]) -> FrozenSet[str]:
    if not raw:
        return frozenset()
    return frozenset(ns.strip() for ns in raw.split(",") if ns.strip())


class ExporterOptions(BaseModel):
    """
    Construction-time options for the scrape scheduler.

    Attributes:
        node_scrape_interval: Seconds between node capacity scrapes (default 1h).
        metrics_scrape_interval: Seconds between metrics-server usage scrapes (default 30s).
        scrape_timeout: Deadline in seconds for a single scrape call (default 10s).
        excluded_namespaces: Namespaces whose pod usage is not exported.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    node_scrape_interval: float = Field(3600.0, description="Node capacity scrape interval in seconds")
    metrics_scrape_interval: float = Field(30.0, description="Usage scrape interval in seconds")
    scrape_timeout: float = Field(10.0, description="Per-call scrape deadline in seconds")
    excluded_namespaces: FrozenSet[str] = Field(default_factory=frozenset, description="Namespaces to skip")

    @field_validator("node_scrape_interval", "metrics_scrape_interval", "scrape_timeout", mode="before")
    @classmethod
    def _coerce_duration(cls, value):
        try:
            return parse_duration(value)
        except ConfigurationError as e:
            raise ValueError(str(e)) from e

    @field_validator("excluded_namespaces", mode="before")
    @classmethod
    def _coerce_namespaces(cls, value):
        if value is None:
            return frozenset()
        if isinstance(value, str):
            return _split_namespaces(value)
        return value

    @model_validator(mode="after")
    def _check_positive(self):
        for name in ("node_scrape_interval", "metrics_scrape_interval", "scrape_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be greater than zero")
        return self


def build_options(**values) -> ExporterOptions:
    """
    Builds and validates ExporterOptions. Options passed as None fall back to defaults.

    Raises:
        ConfigurationError: If any value is invalid.
    """
    values = {k: v for k, v in values.items() if v is not None}
    try:
        return ExporterOptions(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid exporter options: {e}") from e


class Config:
    """
    Handles the application's configuration by loading values from environment variables.
    """

    # --- Logging variables ---
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # --- Scrape variables ---
    NODE_SCRAPE_INTERVAL = os.getenv("NODE_SCRAPE_INTERVAL", DEFAULT_NODE_SCRAPE_INTERVAL)
    METRICS_SCRAPE_INTERVAL = os.getenv("METRICS_SCRAPE_INTERVAL", DEFAULT_METRICS_SCRAPE_INTERVAL)
    SCRAPE_TIMEOUT = os.getenv("SCRAPE_TIMEOUT", DEFAULT_SCRAPE_TIMEOUT)
    EXCLUDED_NAMESPACES = os.getenv("EXCLUDED_NAMESPACES", "")

    # --- Kubernetes variables ---
    KUBE_IN_CLUSTER = os.getenv("KUBE_IN_CLUSTER", "True").lower() in (
        "true",
        "1",
        "t",
        "y",
        "yes",
    )
    KUBECONFIG = os.getenv("KUBECONFIG")

    # --- API variables ---
    API_HOST = os.getenv("API_HOST", "0.0.0.0")
    API_PORT = int(os.getenv("API_PORT", "8080"))

    def to_options(self) -> ExporterOptions:
        """Builds validated ExporterOptions from the configured scrape values."""
        return build_options(
            node_scrape_interval=self.NODE_SCRAPE_INTERVAL,
            metrics_scrape_interval=self.METRICS_SCRAPE_INTERVAL,
            scrape_timeout=self.SCRAPE_TIMEOUT,
            excluded_namespaces=self.EXCLUDED_NAMESPACES,
        )

    def validate_instance(self):
        """
        Raises:
            ConfigurationError: If the log level, the API port or a duration is invalid.
        """
        if self.LOG_LEVEL.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"LOG_LEVEL must be one of: {', '.join(LOG_LEVELS)}.")
        if not 0 < self.API_PORT < 65536:
            raise ConfigurationError("API_PORT must be between 1 and 65535.")
        for key in ("NODE_SCRAPE_INTERVAL", "METRICS_SCRAPE_INTERVAL", "SCRAPE_TIMEOUT"):
            parse_duration(getattr(self, key))


# Instantiate the config to be imported by other modules
config = Config()
