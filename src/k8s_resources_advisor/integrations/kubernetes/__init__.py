"""Kubernetes cluster integration."""

from k8s_resources_advisor.integrations.kubernetes.client import KubernetesClient
from k8s_resources_advisor.integrations.kubernetes.config import KubernetesConfig
from k8s_resources_advisor.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
)
from k8s_resources_advisor.integrations.kubernetes.models import PodResources

__all__ = [
    "KubernetesAuthError",
    "KubernetesClient",
    "KubernetesConfig",
    "KubernetesConnectionError",
    "KubernetesError",
    "KubernetesNotFoundError",
    "PodResources",
]
