"""Kubernetes connection configuration."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _default_kubeconfig() -> str:
    return os.environ.get("KUBECONFIG", "")


class KubernetesConfig(BaseModel):
    """How to reach the cluster.

    An empty ``kubeconfig`` uses the default kubeconfig location and, if
    that cannot be loaded, the in-cluster service account.

    Attributes:
        kubeconfig: Path to a kubeconfig file.
        context: Kubeconfig context to use (default: current context).
        timeout: API request timeout in seconds.
        retry_attempts: Attempts for transient connection failures.
    """

    model_config = ConfigDict(extra="forbid")

    kubeconfig: str = Field(default_factory=_default_kubeconfig)
    context: str | None = None
    timeout: int = 60
    retry_attempts: int = 3

    @field_validator("kubeconfig")
    @classmethod
    def validate_kubeconfig(cls, v: str) -> str:
        """Expand ~ in kubeconfig path."""
        return str(Path(v).expanduser()) if v else ""

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        """Validate at least one attempt is made."""
        if v < 1:
            raise ValueError("retry_attempts must be at least 1")
        return v
