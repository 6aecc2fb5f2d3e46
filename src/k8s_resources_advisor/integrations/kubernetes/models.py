"""Kubernetes pod/container resource display models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from k8s_resources_advisor.recommender.types import ContainerIdentity

SAFE_TO_EVICT_ANNOTATION = "cluster-autoscaler.kubernetes.io/safe-to-evict"
POD_TEMPLATE_HASH_LABEL = "pod-template-hash"
OOM_KILLED_REASON = "OOMKilled"
EVICTED_REASON = "Evicted"


def _safe_get(obj: Any, *attrs: str, default: Any = None) -> Any:
    """Safely traverse nested attributes on kubernetes SDK objects."""
    current = obj
    for attr in attrs:
        if current is None:
            return default
        current = getattr(current, attr, None)
    return current if current is not None else default


def _pod_template_name(pod: Any) -> str:
    """Derive the owning template name from ``generateName``.

    ReplicaSet pods are named ``<deployment>-<hash>-<suffix>`` with
    ``generateName`` ``<deployment>-<hash>-``; dropping the hash leaves the
    deployment prefix shared by every rollout of the template.
    """
    template = _safe_get(pod, "metadata", "generate_name", default="")
    labels = _safe_get(pod, "metadata", "labels") or {}
    if template_hash := labels.get(POD_TEMPLATE_HASH_LABEL):
        template = template.removesuffix(f"{template_hash}-")
    return str(template)


def _last_terminated_reason(pod: Any, container_name: str) -> str | None:
    for status in _safe_get(pod, "status", "container_statuses") or []:
        if getattr(status, "name", None) == container_name:
            return _safe_get(status, "last_state", "terminated", "reason")
    return None


def _quantity(resources: Any, section: str, name: str) -> str:
    values = _safe_get(resources, section) or {}
    return str(values.get(name, "") or "")


class PodResources(BaseModel):
    """Declared resources of one container, plus the pod facts shown beside them.

    Field aliases are the report's column names and the names accepted by
    row filter expressions.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    pod_name: str = Field(alias="PodName")
    pod_template: str = Field(default="", alias="PodTemplate")
    container_name: str = Field(alias="ContainerName")
    node_name: str = Field(default="", alias="NodeName")
    namespace: str = Field(alias="Namespace")
    memory_request: str = Field(default="", alias="MemoryRequest")
    memory_limit: str = Field(default="", alias="MemoryLimit")
    cpu_request: str = Field(default="", alias="CPURequest")
    cpu_limit: str = Field(default="", alias="CPULimit")
    qos: str = Field(default="", alias="QoS")
    safe_to_evict: bool = Field(default=False, alias="SafeToEvict")
    oom_killed: bool = Field(default=False, alias="OOMKilled")
    evicted: bool = Field(default=False, alias="Evicted")

    @classmethod
    def from_k8s_container(cls, pod: Any, container: Any) -> PodResources:
        """Create from a kubernetes V1Pod and one of its V1Containers."""
        container_name = getattr(container, "name", "") or ""
        resources = getattr(container, "resources", None)
        annotations = _safe_get(pod, "metadata", "annotations") or {}

        return cls(
            pod_name=_safe_get(pod, "metadata", "name", default=""),
            pod_template=_pod_template_name(pod),
            container_name=container_name,
            node_name=_safe_get(pod, "spec", "node_name", default=""),
            namespace=_safe_get(pod, "metadata", "namespace", default=""),
            memory_request=_quantity(resources, "requests", "memory"),
            memory_limit=_quantity(resources, "limits", "memory"),
            cpu_request=_quantity(resources, "requests", "cpu"),
            cpu_limit=_quantity(resources, "limits", "cpu"),
            qos=_safe_get(pod, "status", "qos_class", default=""),
            # The annotation value "false" marks pods the autoscaler must not evict
            safe_to_evict=annotations.get(SAFE_TO_EVICT_ANNOTATION) == "false",
            oom_killed=_last_terminated_reason(pod, container_name) == OOM_KILLED_REASON,
            evicted=_safe_get(pod, "status", "reason") == EVICTED_REASON,
        )

    @property
    def identity(self) -> ContainerIdentity:
        """Identity used for recommendation lookups."""
        return ContainerIdentity(
            container_name=self.container_name,
            pod_name=self.pod_name,
            namespace=self.namespace,
            pod_template_name=self.pod_template,
        )
