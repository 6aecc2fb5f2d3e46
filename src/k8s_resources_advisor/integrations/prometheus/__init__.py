"""Prometheus metrics backend integration."""

from k8s_resources_advisor.integrations.prometheus.client import (
    PrometheusAuthError,
    PrometheusClient,
    PrometheusClientError,
    PrometheusConnectionError,
    PrometheusNotFoundError,
    PrometheusQueryError,
    QueryResult,
    Sample,
)
from k8s_resources_advisor.integrations.prometheus.config import PrometheusConfig

__all__ = [
    "PrometheusAuthError",
    "PrometheusClient",
    "PrometheusClientError",
    "PrometheusConfig",
    "PrometheusConnectionError",
    "PrometheusNotFoundError",
    "PrometheusQueryError",
    "QueryResult",
    "Sample",
]
