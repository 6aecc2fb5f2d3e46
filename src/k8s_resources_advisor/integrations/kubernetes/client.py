"""Kubernetes API client wrapper.

Loads kubeconfig (or in-cluster configuration), exposes the core API
lazily and translates API exceptions into the integration's own errors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from k8s_resources_advisor.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
)

if TYPE_CHECKING:
    from kubernetes.client import CoreV1Api

    from k8s_resources_advisor.integrations.kubernetes.config import KubernetesConfig

logger = structlog.get_logger()


class KubernetesClient:
    """Kubernetes API client.

    Example:
        ```python
        with KubernetesClient(KubernetesConfig()) as client:
            pods = client.core_v1.list_pod_for_all_namespaces()
        ```
    """

    def __init__(self, config: KubernetesConfig) -> None:
        """Initialize and load cluster configuration.

        Args:
            config: Connection configuration.

        Raises:
            KubernetesConnectionError: If neither kubeconfig nor in-cluster
                configuration can be loaded.
        """
        self._config = config
        self._retries = config.retry_attempts
        self._current_context: str | None = None
        self._core_v1: CoreV1Api | None = None

        self._load_config()

        logger.info("kubernetes_client_initialized", context=self._current_context)

    def _load_config(self) -> None:
        """Load Kubernetes configuration from kubeconfig or in-cluster."""
        from kubernetes import config
        from kubernetes.config import ConfigException

        kubeconfig_path = self._config.kubeconfig or None

        try:
            config.load_kube_config(
                config_file=kubeconfig_path,
                context=self._config.context,
            )
            self._current_context = self._config.context or "current-context"
            logger.debug(
                "loaded_kubeconfig",
                context=self._config.context,
                kubeconfig=kubeconfig_path,
            )
        except (ConfigException, FileNotFoundError) as kubeconfig_error:
            if kubeconfig_path:
                raise KubernetesConnectionError(
                    message=f"Cannot load kubeconfig '{kubeconfig_path}'",
                    original_error=kubeconfig_error,
                ) from kubeconfig_error
            try:
                config.load_incluster_config()
                self._current_context = "in-cluster"
                logger.debug("loaded_incluster_config")
            except ConfigException as e:
                raise KubernetesConnectionError(
                    message="Cannot load Kubernetes configuration. "
                    "Ensure kubeconfig exists or running inside a cluster.",
                    original_error=e,
                ) from e

        self._core_v1 = None

    @property
    def core_v1(self) -> CoreV1Api:
        """Get CoreV1Api instance."""
        if self._core_v1 is None:
            from kubernetes.client import CoreV1Api

            self._core_v1 = CoreV1Api()
        return self._core_v1

    @property
    def timeout(self) -> int:
        """Request timeout in seconds."""
        return self._config.timeout

    @staticmethod
    def translate_api_exception(e: Exception, namespace: str | None = None) -> KubernetesError:
        """Translate a kubernetes ApiException (or transport error) to a KubernetesError.

        Args:
            e: The original exception.
            namespace: Namespace the call targeted.

        Returns:
            An appropriate KubernetesError subclass.
        """
        from kubernetes.client import ApiException
        from urllib3.exceptions import HTTPError as Urllib3HTTPError

        if isinstance(e, Urllib3HTTPError):
            return KubernetesConnectionError(
                message="Kubernetes API server is unreachable",
                original_error=e,
            )

        if not isinstance(e, ApiException):
            return KubernetesError(message=str(e), namespace=namespace)

        status = e.status

        if status in (401, 403):
            return KubernetesAuthError(
                message=e.reason or "Authentication/authorization failed",
                status_code=status,
                namespace=namespace,
            )

        if status == 404:
            return KubernetesNotFoundError(namespace=namespace)

        return KubernetesError(
            message=e.reason or f"Kubernetes API error: {status}",
            status_code=status,
            namespace=namespace,
        )

    def make_retry_decorator(self) -> Any:
        """Create a retry decorator for transient connection errors."""
        return retry(
            retry=retry_if_exception_type(KubernetesConnectionError),
            stop=stop_after_attempt(self._retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )

    def close(self) -> None:
        """Close the client and release resources."""
        self._core_v1 = None
        logger.debug("kubernetes_client_closed")

    def __enter__(self) -> KubernetesClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
