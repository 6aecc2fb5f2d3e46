"""Application configuration.

Values come from, lowest to highest precedence: a YAML config file,
``K8S_RESOURCES_*`` environment variables, then CLI flags. Everything is
validated once, up front, and any problem is a ConfigurationError.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from k8s_resources_advisor.exceptions import ConfigurationError
from k8s_resources_advisor.integrations.kubernetes.config import KubernetesConfig
from k8s_resources_advisor.integrations.prometheus.config import PrometheusConfig
from k8s_resources_advisor.recommender.scorer import ScoringThresholds
from k8s_resources_advisor.recommender.types import GroupingMode, Strategy

logger = structlog.get_logger()

ENV_PREFIX = "K8S_RESOURCES_"
DEFAULT_RESULT_FILE = "result.txt"
MASKED = "********"

# Environment variable suffix -> config path
ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "NAMESPACE": ("namespace",),
    "POD_LABEL_SELECTOR": ("pod_label_selector",),
    "FILTER": ("filter",),
    "STRATEGY": ("strategy",),
    "GROUP_BY": ("group_by",),
    "RESULT_FILE": ("result_file",),
    "WORKERS": ("workers",),
    "KUBECONFIG": ("kubernetes", "kubeconfig"),
    "CONTEXT": ("kubernetes", "context"),
    "PROMETHEUS_URL": ("prometheus", "url"),
    "PROMETHEUS_USER": ("prometheus", "username"),
    "PROMETHEUS_PASSWORD": ("prometheus", "password"),
    "PROMETHEUS_TOKEN": ("prometheus", "token"),
    "PROMETHEUS_RETENTION": ("prometheus", "retention"),
    "PROMETHEUS_GROUP_FIELD": ("prometheus", "group_field"),
    "PROMETHEUS_GROUP_VALUE": ("prometheus", "group_value"),
}


class AppConfig(BaseModel):
    """Complete advisor configuration.

    Attributes:
        namespace: Namespace to report on; all namespaces when empty.
        pod_label_selector: Pod label selector.
        filter: Row filter expression (``Field==value,...``).
        show_qos: Add the QoS column.
        show_safe_to_evict: Add the SafeToEvict column.
        show_debug_json: Add a column with each record as JSON.
        no_cpu_request: Show rows without a CPU request.
        no_memory_request: Show rows without a memory request.
        oom_killed: Show rows whose container was OOM killed.
        strategy: Limit recommendation strategy.
        group_by: Grouping mode for metric lookups.
        result_file: Where to write the plain-text table; empty disables it.
        workers: Concurrent recommendation lookups; 1 is sequential.
        thresholds: Scorer thresholds.
        prometheus: Metrics backend settings.
        kubernetes: Cluster connection settings.
    """

    model_config = ConfigDict(extra="forbid")

    namespace: str = ""
    pod_label_selector: str = ""
    filter: str = ""
    show_qos: bool = False
    show_safe_to_evict: bool = False
    show_debug_json: bool = False
    no_cpu_request: bool = False
    no_memory_request: bool = False
    oom_killed: bool = False
    strategy: Strategy = Strategy.CONSERVATIVE
    group_by: GroupingMode = GroupingMode.POD_TEMPLATE
    result_file: str = DEFAULT_RESULT_FILE
    workers: int = 1
    thresholds: ScoringThresholds = Field(default_factory=ScoringThresholds)
    prometheus: PrometheusConfig = Field(default_factory=PrometheusConfig)
    kubernetes: KubernetesConfig = Field(default_factory=KubernetesConfig)

    @field_validator("strategy", mode="before")
    @classmethod
    def validate_strategy(cls, v: Any) -> Any:
        """Accept strategy names case-insensitively and reject unknown ones."""
        if isinstance(v, str):
            v = v.strip().lower()
            if v not in {s.value for s in Strategy}:
                raise ValueError(f"unknown strategy type {v!r}")
        return v

    @field_validator("group_by", mode="before")
    @classmethod
    def validate_group_by(cls, v: Any) -> Any:
        """Accept grouping names case-insensitively and reject unknown ones."""
        if isinstance(v, str):
            v = v.strip().lower()
            if v not in {g.value for g in GroupingMode}:
                raise ValueError(f"unknown grouping mode {v!r}")
        return v

    @field_validator("workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        """Validate at least one worker."""
        if v < 1:
            raise ValueError("workers must be at least 1")
        return v

    def to_yaml(self) -> str:
        """Dump the effective configuration with secrets masked."""
        data = self.model_dump(mode="json")
        for secret in ("password", "token"):
            if data["prometheus"].get(secret):
                data["prometheus"][secret] = MASKED
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


def _set_path(data: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    target = data
    for key in path[:-1]:
        nested = target.get(key)
        if not isinstance(nested, dict):
            nested = {}
            target[key] = nested
        target = nested
    target[path[-1]] = value


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML config file into a mapping.

    Raises:
        ConfigurationError: If the file is unreadable, not YAML or not a mapping.
    """
    try:
        content = yaml.safe_load(path.read_text())
    except OSError as e:
        raise ConfigurationError(f"error opening config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"error parsing config {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigurationError(f"config {path} must contain a mapping at the top level")
    return content


def env_overrides(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Collect ``K8S_RESOURCES_*`` overrides as a nested mapping."""
    environ = dict(os.environ) if environ is None else environ
    overrides: dict[str, Any] = {}
    for suffix, path in ENV_OVERRIDES.items():
        if value := environ.get(f"{ENV_PREFIX}{suffix}"):
            _set_path(overrides, path, value)
    return overrides


def load_config(
    config_file: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Build and validate the effective configuration.

    Args:
        config_file: Optional YAML config file.
        overrides: Nested CLI overrides; ``None`` values are ignored.

    Returns:
        The validated configuration.

    Raises:
        ConfigurationError: If any source is unreadable or any value invalid.
    """
    data: dict[str, Any] = read_config_file(config_file) if config_file else {}
    data = _deep_merge(data, env_overrides())
    data = _deep_merge(data, overrides or {})

    try:
        config = AppConfig.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"invalid configuration: {problems}") from e

    logger.debug("using_config", config_file=str(config_file) if config_file else None)
    return config
