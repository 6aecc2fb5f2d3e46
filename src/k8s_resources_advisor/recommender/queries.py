"""PromQL query construction and cache-key derivation for recommendation lookups."""

from __future__ import annotations

from k8s_resources_advisor.recommender.types import (
    ContainerIdentity,
    GroupingMode,
    RecommendationQuerySet,
    Strategy,
)

# =============================================================================
# Metric names and windows
# =============================================================================

MEMORY_METRIC = "container_memory_working_set_bytes"
CPU_METRIC = "container_cpu_usage_seconds_total"
OOM_METRIC = "kube_pod_container_status_last_terminated_reason"

REQUEST_QUANTILE = "0.50"
AGGRESSIVE_LIMIT_QUANTILE = "0.99"
CPU_RATE_WINDOW = "1m"
DEFAULT_RETENTION = "7d"


def resolve_grouping_mode(identity: ContainerIdentity, mode: GroupingMode) -> GroupingMode:
    """Return the grouping mode actually usable for ``identity``.

    Pod-template grouping needs a template name; without one the lookup
    degrades to pod grouping.
    """
    if mode is GroupingMode.POD_TEMPLATE and not identity.pod_template_name:
        return GroupingMode.POD
    return mode


def cache_key(identity: ContainerIdentity, mode: GroupingMode) -> str:
    """Derive the cache key for a lookup.

    Args:
        identity: Container being looked up.
        mode: Requested grouping mode; pod-template falls back to pod when
            the identity has no template name.

    Returns:
        Key unique to the (grouping-scoped) query set.
    """
    match resolve_grouping_mode(identity, mode):
        case GroupingMode.CONTAINER:
            return f"{identity.container_name}:{identity.namespace}"
        case GroupingMode.POD:
            return f"{identity.pod_name}:{identity.container_name}:{identity.namespace}"
        case GroupingMode.POD_TEMPLATE:
            return (
                f"{identity.pod_template_name},{identity.container_name}:{identity.namespace}"
            )


class QueryBuilder:
    """Render the recommendation queries for a container.

    Requests use the median over the retention window. Limits use the
    maximum (conservative) or the 99th percentile (aggressive). Every query
    reduces with ``max`` across whatever series match.

    Example:
        ```python
        builder = QueryBuilder(Strategy.CONSERVATIVE, retention="7d")
        queries = builder.build(identity, GroupingMode.POD)
        queries.memory_request
        ```
    """

    def __init__(
        self,
        strategy: Strategy,
        retention: str = DEFAULT_RETENTION,
        group_field: str = "",
        group_value: str = "",
    ) -> None:
        """Initialize the builder.

        Args:
            strategy: Limit strategy.
            retention: Lookback window, e.g. ``"7d"``.
            group_field: Optional extra label to match (regex) on every query.
            group_value: Regex value for ``group_field``.
        """
        self.strategy = strategy
        self.retention = retention
        self.group_field = group_field
        self.group_value = group_value

    def label_matcher(self, identity: ContainerIdentity, mode: GroupingMode) -> str:
        """Build the label matcher body (without braces) for one lookup."""
        matcher = f'container="{identity.container_name}",namespace="{identity.namespace}"'

        if self.group_field:
            matcher += f',{self.group_field}=~"{self.group_value}"'

        match resolve_grouping_mode(identity, mode):
            case GroupingMode.CONTAINER:
                pass
            case GroupingMode.POD:
                matcher += f',pod="{identity.pod_name}"'
            case GroupingMode.POD_TEMPLATE:
                matcher += f',pod=~"{identity.pod_template_name}.+"'

        return matcher

    def _memory(self, aggregation: str, matcher: str) -> str:
        return f"max({aggregation}{MEMORY_METRIC}{{{matcher}}}[{self.retention}]))"

    def _cpu(self, aggregation: str, matcher: str) -> str:
        rate = f"rate({CPU_METRIC}{{{matcher}}}[{CPU_RATE_WINDOW}])"
        return f"max({aggregation}{rate}[{self.retention}:{CPU_RATE_WINDOW}]))"

    def _limit_aggregation(self) -> str:
        match self.strategy:
            case Strategy.CONSERVATIVE:
                return "max_over_time("
            case Strategy.AGGRESSIVE:
                return f"quantile_over_time({AGGRESSIVE_LIMIT_QUANTILE},"

    def build(self, identity: ContainerIdentity, mode: GroupingMode) -> RecommendationQuerySet:
        """Render the five queries for a container.

        Args:
            identity: Container being looked up.
            mode: Grouping mode; pod-template falls back to pod when the
                identity has no template name.

        Returns:
            The rendered query set.
        """
        matcher = self.label_matcher(identity, mode)
        request_aggregation = f"quantile_over_time({REQUEST_QUANTILE},"
        limit_aggregation = self._limit_aggregation()

        return RecommendationQuerySet(
            memory_request=self._memory(request_aggregation, matcher),
            memory_limit=self._memory(limit_aggregation, matcher),
            cpu_request=self._cpu(request_aggregation, matcher),
            cpu_limit=self._cpu(limit_aggregation, matcher),
            oom_kill_count=(
                f'sum(sum_over_time({OOM_METRIC}{{reason="OOMKilled",{matcher}}}'
                f"[{self.retention}]))"
            ),
        )
