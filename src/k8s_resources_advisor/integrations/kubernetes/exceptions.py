"""Kubernetes integration exceptions."""

from __future__ import annotations


class KubernetesError(Exception):
    """Base exception for Kubernetes operations.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code from the Kubernetes API, if any.
        namespace: Namespace the failing call targeted, if any.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        namespace: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.namespace = namespace

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code:
            parts.append(f"(status: {self.status_code})")
        if self.namespace:
            parts.append(f"[namespace {self.namespace}]")
        return " ".join(parts)


class KubernetesConnectionError(KubernetesError):
    """Raised when no usable cluster configuration can be loaded or the API is unreachable."""

    def __init__(
        self,
        message: str = "Failed to connect to Kubernetes cluster",
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message=message)
        self.original_error = original_error


class KubernetesAuthError(KubernetesError):
    """Raised on 401/403 responses, e.g. missing RBAC permission to list pods."""

    def __init__(
        self,
        message: str = "Kubernetes authentication/authorization failed",
        status_code: int | None = 401,
        namespace: str | None = None,
    ) -> None:
        super().__init__(message=message, status_code=status_code, namespace=namespace)


class KubernetesNotFoundError(KubernetesError):
    """Raised on 404 responses, e.g. a namespace that does not exist."""

    def __init__(self, namespace: str | None = None) -> None:
        message = "Kubernetes resource not found"
        if namespace:
            message = f"namespace '{namespace}' not found"
        super().__init__(message=message, status_code=404, namespace=namespace)
