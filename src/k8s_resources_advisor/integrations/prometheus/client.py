"""Prometheus HTTP API client.

Executes instant queries against ``/api/v1/query`` with retry on transient
connection failures and typed errors for everything else.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, cast

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from k8s_resources_advisor.integrations.prometheus.config import PrometheusConfig

logger = structlog.get_logger()


# =============================================================================
# Errors
# =============================================================================


class PrometheusClientError(Exception):
    """Base exception for Prometheus client errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PrometheusConnectionError(PrometheusClientError):
    """Raised when Prometheus cannot be reached after all retries."""


class PrometheusAuthError(PrometheusClientError):
    """Raised when Prometheus rejects the credentials (401/403)."""


class PrometheusNotFoundError(PrometheusClientError):
    """Raised when the API path does not exist (404)."""


class PrometheusQueryError(PrometheusClientError):
    """Raised when Prometheus reports a failed query or returns an unreadable body."""


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class Sample:
    """One series of an instant-vector result."""

    labels: dict[str, str]
    value: float
    timestamp: float


@dataclass(frozen=True)
class QueryResult:
    """Parsed instant-query response."""

    result_type: str
    samples: list[Sample] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# =============================================================================
# Client
# =============================================================================


class PrometheusClient:
    """Client for the Prometheus query API.

    Example:
        ```python
        config = PrometheusConfig(url="http://prometheus:9090")
        with PrometheusClient(config) as client:
            result = client.query('max(container_memory_working_set_bytes{container="api"})')
            for sample in result.samples:
                print(sample.labels, sample.value)
        ```
    """

    client_name = "Prometheus"

    def __init__(self, config: PrometheusConfig) -> None:
        """Initialize Prometheus client.

        Args:
            config: Prometheus configuration.
        """
        self.config = config
        self.base_url = config.url
        self.timeout = config.timeout
        self._retries = config.retries
        self._retry_wait: wait_base = wait_exponential(multiplier=1, min=1, max=10)
        self._client: httpx.Client | None = None

    def _build_client(self) -> httpx.Client:
        """Build an httpx client with the configured authentication."""
        auth = None
        headers: dict[str, str] = {}
        if self.config.auth_type == "basic" and self.config.username:
            auth = (self.config.username, self.config.password or "")
        elif self.config.auth_type == "bearer" and self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"

        return httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            auth=auth,
            headers=headers or None,
        )

    @property
    def client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = self._build_client()
        return self._client

    def __enter__(self) -> PrometheusClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit - close client."""
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.debug("prometheus_client_closed")

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Make an HTTP request, retrying connect and timeout failures.

        Raises:
            PrometheusConnectionError: If every attempt fails to connect.
        """

        @retry(
            retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
            stop=stop_after_attempt(self._retries),
            wait=self._retry_wait,
            reraise=True,
        )
        def _send() -> httpx.Response:
            return self.client.request(method, path, **kwargs)

        try:
            return _send()
        except (httpx.ConnectError, httpx.TimeoutException) as e:
            logger.error(
                "prometheus_connection_failed",
                error=str(e),
                url=f"{self.base_url}{path}",
                attempts=self._retries,
            )
            raise PrometheusConnectionError(f"Failed to connect to Prometheus: {e}") from e

    def _handle_response(self, response: httpx.Response) -> dict[str, Any]:
        """Check the HTTP status and decode the JSON body.

        Prometheus answers failed queries with 400/422 and a JSON error
        body; those surface as PrometheusQueryError with the server message.

        Raises:
            PrometheusAuthError: On 401/403.
            PrometheusNotFoundError: On 404.
            PrometheusQueryError: On a JSON error body or undecodable response.
            PrometheusClientError: For other HTTP errors.
        """
        if response.status_code in (401, 403):
            raise PrometheusAuthError(
                "Prometheus authentication failed"
                if response.status_code == 401
                else "Prometheus access forbidden",
                status_code=response.status_code,
            )

        if response.status_code == 404:
            raise PrometheusNotFoundError("Prometheus API path not found", status_code=404)

        try:
            data = response.json()
        except ValueError as e:
            if response.status_code >= 400:
                raise PrometheusClientError(
                    f"Prometheus request failed: {response.text}",
                    status_code=response.status_code,
                ) from e
            raise PrometheusQueryError("Prometheus returned a non-JSON response") from e

        if not isinstance(data, dict):
            raise PrometheusQueryError("Prometheus returned an unexpected response body")

        if data.get("status") != "success":
            error = data.get("error", "Unknown error")
            raise PrometheusQueryError(
                f"Query failed: {error}", status_code=response.status_code
            )

        return cast(dict[str, Any], data)

    def health_check(self) -> bool:
        """Check if Prometheus is healthy."""
        try:
            response = self._request("GET", "/-/healthy")
            return bool(response.status_code == 200)
        except PrometheusClientError:
            return False

    def query(self, query: str, time: datetime | None = None) -> QueryResult:
        """Execute an instant query.

        Args:
            query: PromQL expression.
            time: Evaluation timestamp (default: now).

        Returns:
            Parsed result with its type, vector samples and server warnings.

        Raises:
            PrometheusClientError: On any transport, auth or query failure.
        """
        params: dict[str, Any] = {"query": query}
        if time:
            params["time"] = time.timestamp()

        logger.debug("prometheus_instant_query", query=query)
        data = self._handle_response(self._request("GET", "/api/v1/query", params=params))
        return _parse_query_result(data)


def _parse_query_result(data: dict[str, Any]) -> QueryResult:
    result_data = data.get("data") or {}
    result_type = str(result_data.get("resultType", ""))
    warnings = [str(w) for w in data.get("warnings") or []]

    samples: list[Sample] = []
    if result_type == "vector":
        for item in result_data.get("result") or []:
            try:
                timestamp, raw_value = item["value"]
                samples.append(
                    Sample(
                        labels=dict(item.get("metric") or {}),
                        value=float(raw_value),
                        timestamp=float(timestamp),
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                raise PrometheusQueryError(f"Malformed vector sample: {item!r}") from e

    return QueryResult(result_type=result_type, samples=samples, warnings=warnings)
