"""Recommendation engine.

Turns a container identity into a usage-based recommendation by rendering
the metric queries, running them against Prometheus and formatting the
results. Each distinct cache key is queried at most once per engine.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

import structlog

from k8s_resources_advisor.exceptions import BackendQueryError
from k8s_resources_advisor.integrations.prometheus.client import (
    PrometheusClientError,
    PrometheusQueryError,
)
from k8s_resources_advisor.recommender.cache import RecommendationCache
from k8s_resources_advisor.recommender.queries import (
    QueryBuilder,
    cache_key,
    resolve_grouping_mode,
)
from k8s_resources_advisor.recommender.types import (
    ContainerIdentity,
    GroupingMode,
    Recommendation,
)
from k8s_resources_advisor.recommender.units import format_bytes_si, format_millicores

if TYPE_CHECKING:
    from k8s_resources_advisor.integrations.prometheus.client import PrometheusClient

logger = structlog.get_logger()


class RecommendationEngine:
    """Produce recommendations for containers, caching per grouping key.

    The engine owns its cache; two engines never share results.

    Example:
        ```python
        engine = RecommendationEngine(
            client, QueryBuilder(Strategy.CONSERVATIVE), GroupingMode.POD_TEMPLATE
        )
        recommendation = engine.recommend(identity)
        ```
    """

    def __init__(
        self,
        client: PrometheusClient,
        builder: QueryBuilder,
        grouping_mode: GroupingMode,
        cache: RecommendationCache | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            client: Metrics backend client.
            builder: Query builder carrying strategy, retention and group label.
            grouping_mode: Requested grouping mode for every lookup.
            cache: Cache to populate; a fresh one is created when omitted.
        """
        self._client = client
        self._builder = builder
        self.grouping_mode = grouping_mode
        self.cache = cache if cache is not None else RecommendationCache()

    def resolve(self, identity: ContainerIdentity) -> tuple[GroupingMode, str]:
        """Return the effective grouping mode and cache key for ``identity``."""
        mode = resolve_grouping_mode(identity, self.grouping_mode)
        if mode is not self.grouping_mode:
            logger.debug(
                "grouping_fallback",
                requested=str(self.grouping_mode),
                used=str(mode),
                pod=identity.pod_name,
                container=identity.container_name,
                namespace=identity.namespace,
            )
        return mode, cache_key(identity, mode)

    def recommend(self, identity: ContainerIdentity) -> Recommendation:
        """Return the recommendation for one container.

        Args:
            identity: Container to look up.

        Returns:
            The cached or freshly computed recommendation.

        Raises:
            BackendQueryError: If any query fails or returns a non-vector result.
        """
        mode, key = self.resolve(identity)

        with self.cache.lock_for(key):
            cached = self.cache.lookup(key)
            if cached is not None:
                logger.debug("recommendation_cache_hit", key=key)
                return cached

            recommendation = self._compute(identity, mode)
            self.cache.store(key, recommendation)
            logger.debug("recommendation_cached", key=key, recommendation=recommendation)
            return recommendation

    def recommend_many(
        self,
        identities: Sequence[ContainerIdentity],
        workers: int = 1,
        on_done: Callable[[ContainerIdentity], None] | None = None,
    ) -> list[Recommendation]:
        """Return recommendations for many containers, in input order.

        Args:
            identities: Containers to look up.
            workers: Number of threads; 1 runs sequentially.
            on_done: Called after each container completes (progress reporting).

        Returns:
            One recommendation per identity, aligned with the input.

        Raises:
            BackendQueryError: On the first backend failure; remaining
                lookups are abandoned.
        """

        def _one(identity: ContainerIdentity) -> Recommendation:
            recommendation = self.recommend(identity)
            if on_done is not None:
                on_done(identity)
            return recommendation

        if workers <= 1:
            return [_one(identity) for identity in identities]

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(_one, identity) for identity in identities]
            try:
                return [future.result() for future in futures]
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

    # =========================================================================
    # Query execution
    # =========================================================================

    def _compute(self, identity: ContainerIdentity, mode: GroupingMode) -> Recommendation:
        queries = self._builder.build(identity, mode)

        memory_request = self._scalar("memory request", queries.memory_request)
        memory_limit = self._scalar("memory limit", queries.memory_limit)
        cpu_request = self._scalar("cpu request", queries.cpu_request)
        cpu_limit = self._scalar("cpu limit", queries.cpu_limit)
        oom_kills = self._scalar("oom kill count", queries.oom_kill_count)

        return Recommendation(
            memory_request="" if memory_request is None else format_bytes_si(int(memory_request)),
            memory_limit="" if memory_limit is None else format_bytes_si(int(memory_limit)),
            cpu_request="" if cpu_request is None else format_millicores(cpu_request),
            cpu_limit="" if cpu_limit is None else format_millicores(cpu_limit),
            oom_killed=oom_kills is not None and oom_kills > 0,
        )

    def _scalar(self, purpose: str, query: str) -> float | None:
        """Run one query and return its single value, or None when ambiguous.

        Zero or several series, or a non-finite value, mean "no data".
        """
        try:
            result = self._client.query(query)
        except PrometheusClientError as e:
            raise BackendQueryError(purpose, query=query, original_error=e) from e

        if result.warnings:
            logger.warning("prometheus_query_warnings", purpose=purpose, warnings=result.warnings)

        if result.result_type != "vector":
            error = PrometheusQueryError(f"expected a vector result, got {result.result_type!r}")
            raise BackendQueryError(purpose, query=query, original_error=error)

        if len(result.samples) != 1:
            logger.debug("prometheus_ambiguous_result", purpose=purpose, series=len(result.samples))
            return None

        value = result.samples[0].value
        if not math.isfinite(value):
            logger.debug("prometheus_non_finite_result", purpose=purpose, value=value)
            return None
        return value
