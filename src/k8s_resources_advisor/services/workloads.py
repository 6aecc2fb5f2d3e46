"""Workload lister.

Enumerates pod containers with their declared resources, QoS class,
eviction annotation and termination state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NoReturn

import structlog

from k8s_resources_advisor.exceptions import NoPodsFoundError
from k8s_resources_advisor.integrations.kubernetes.models import PodResources

if TYPE_CHECKING:
    from k8s_resources_advisor.integrations.kubernetes.client import KubernetesClient

logger = structlog.get_logger()


class WorkloadLister:
    """List container resource records from the cluster.

    Example:
        >>> lister = WorkloadLister(client)
        >>> records = lister.list_pod_resources(namespace="prod")
    """

    _entity_name = "pod"

    def __init__(self, client: KubernetesClient) -> None:
        """Initialize the lister.

        Args:
            client: Kubernetes API client instance.
        """
        self._client = client
        self._log = logger.bind(entity=self._entity_name)

    def _handle_api_error(self, e: Exception, namespace: str | None) -> NoReturn:
        raise self._client.translate_api_exception(e, namespace=namespace) from e

    def _list_pods(self, namespace: str | None, label_selector: str | None) -> list[Any]:
        kwargs: dict[str, Any] = {"_request_timeout": self._client.timeout}
        if label_selector:
            kwargs["label_selector"] = label_selector

        @self._client.make_retry_decorator()
        def _call() -> Any:
            try:
                if namespace:
                    return self._client.core_v1.list_namespaced_pod(namespace=namespace, **kwargs)
                return self._client.core_v1.list_pod_for_all_namespaces(**kwargs)
            except Exception as e:
                self._handle_api_error(e, namespace)

        return list(_call().items or [])

    def list_pod_resources(
        self,
        namespace: str | None = None,
        label_selector: str | None = None,
    ) -> list[PodResources]:
        """List one record per container of every matching pod.

        Records follow the API's pod order and each pod's container order.
        Init and ephemeral containers are not included.

        Args:
            namespace: Namespace to list; all namespaces when empty.
            label_selector: Pod label selector (e.g. 'app=api').

        Returns:
            Container resource records.

        Raises:
            NoPodsFoundError: If no pod matches.
            KubernetesError: If the API call fails.
        """
        self._log.debug("listing_pods", namespace=namespace or "*", label_selector=label_selector)
        pods = self._list_pods(namespace, label_selector)

        if not pods:
            raise NoPodsFoundError(namespace=namespace, label_selector=label_selector)

        records = [
            PodResources.from_k8s_container(pod, container)
            for pod in pods
            for container in (getattr(pod.spec, "containers", None) or [])
        ]
        self._log.debug("listed_pods", pods=len(pods), containers=len(records))
        return records
