"""Unit tests for RecommendationEngine."""

from __future__ import annotations

import threading
import time
from unittest.mock import MagicMock

import pytest

from k8s_resources_advisor.exceptions import BackendQueryError
from k8s_resources_advisor.integrations.prometheus.client import (
    PrometheusConnectionError,
    QueryResult,
    Sample,
)
from k8s_resources_advisor.recommender.engine import RecommendationEngine
from k8s_resources_advisor.recommender.queries import QueryBuilder
from k8s_resources_advisor.recommender.types import (
    ContainerIdentity,
    GroupingMode,
    Recommendation,
    Strategy,
)


def _vector(*values: float) -> QueryResult:
    return QueryResult(
        result_type="vector",
        samples=[Sample(labels={}, value=v, timestamp=1700000000.0) for v in values],
    )


def _answer(query: str) -> QueryResult:
    """Fake backend keyed on the query shape."""
    if query.startswith("sum("):
        return _vector(0.0)
    if "container_memory_working_set_bytes" in query:
        return _vector(128000000.0 if "0.50" in query else 256000000.0)
    return _vector(0.1 if "0.50" in query else 0.5)


@pytest.fixture
def mock_client() -> MagicMock:
    """Prometheus client answering every query with one sample."""
    client = MagicMock()
    client.query.side_effect = _answer
    return client


@pytest.fixture
def engine(mock_client: MagicMock) -> RecommendationEngine:
    """Engine grouping by pod template."""
    return RecommendationEngine(
        mock_client, QueryBuilder(Strategy.CONSERVATIVE), GroupingMode.POD_TEMPLATE
    )


def _identity(pod: str, template: str = "api-") -> ContainerIdentity:
    return ContainerIdentity(
        container_name="api", pod_name=pod, namespace="prod", pod_template_name=template
    )


@pytest.mark.unit
class TestRecommend:
    """Tests for RecommendationEngine.recommend."""

    def test_formats_values(self, engine: RecommendationEngine) -> None:
        """Values are formatted as SI bytes and millicores."""
        recommendation = engine.recommend(_identity("api-1"))

        assert recommendation == Recommendation(
            memory_request="128Mi",
            memory_limit="256Mi",
            cpu_request="100m",
            cpu_limit="500m",
            oom_killed=False,
        )

    def test_runs_five_queries_in_order(
        self, engine: RecommendationEngine, mock_client: MagicMock
    ) -> None:
        """Memory request, memory limit, cpu request, cpu limit, then OOM count."""
        engine.recommend(_identity("api-1"))

        queries = [call.args[0] for call in mock_client.query.call_args_list]
        assert len(queries) == 5
        assert queries[0].startswith("max(quantile_over_time(0.50,container_memory")
        assert queries[1].startswith("max(max_over_time(container_memory")
        assert queries[2].startswith("max(quantile_over_time(0.50,rate(")
        assert queries[3].startswith("max(max_over_time(rate(")
        assert queries[4].startswith("sum(sum_over_time(kube_pod_container_status")

    def test_same_key_queried_once(
        self, engine: RecommendationEngine, mock_client: MagicMock
    ) -> None:
        """Replicas of one template hit the cache after the first lookup."""
        first = engine.recommend(_identity("api-1"))
        second = engine.recommend(_identity("api-2"))

        assert first == second
        assert mock_client.query.call_count == 5
        assert len(engine.cache) == 1

    def test_different_keys_queried_separately(
        self, engine: RecommendationEngine, mock_client: MagicMock
    ) -> None:
        """Different templates each get their own query set."""
        engine.recommend(_identity("api-1", template="api-"))
        engine.recommend(_identity("web-1", template="web-"))

        assert mock_client.query.call_count == 10
        assert len(engine.cache) == 2

    def test_engines_do_not_share_cache(self, mock_client: MagicMock) -> None:
        """A new engine starts with an empty cache."""
        builder = QueryBuilder(Strategy.CONSERVATIVE)
        RecommendationEngine(mock_client, builder, GroupingMode.POD).recommend(_identity("a"))
        RecommendationEngine(mock_client, builder, GroupingMode.POD).recommend(_identity("a"))

        assert mock_client.query.call_count == 10

    def test_ambiguous_result_is_empty(
        self, engine: RecommendationEngine, mock_client: MagicMock
    ) -> None:
        """Zero or several series leave the field empty."""

        def answer(query: str) -> QueryResult:
            if "container_memory_working_set_bytes" in query:
                return _vector(1.0, 2.0)
            if "rate(" in query:
                return _vector()
            return _vector(0.0)

        mock_client.query.side_effect = answer

        recommendation = engine.recommend(_identity("api-1"))

        assert recommendation == Recommendation()

    def test_non_finite_value_is_empty(
        self, engine: RecommendationEngine, mock_client: MagicMock
    ) -> None:
        """NaN samples mean no data."""

        def answer(query: str) -> QueryResult:
            if "container_memory_working_set_bytes" in query:
                return _vector(float("nan"))
            return _answer(query)

        mock_client.query.side_effect = answer

        recommendation = engine.recommend(_identity("api-1"))

        assert recommendation.memory_request == ""
        assert recommendation.memory_limit == ""
        assert recommendation.cpu_request == "100m"

    def test_oom_count_sets_flag(
        self, engine: RecommendationEngine, mock_client: MagicMock
    ) -> None:
        """A positive OOM kill count marks the recommendation."""

        def answer(query: str) -> QueryResult:
            if query.startswith("sum("):
                return _vector(2.0)
            return _answer(query)

        mock_client.query.side_effect = answer

        assert engine.recommend(_identity("api-1")).oom_killed is True

    def test_backend_error_is_wrapped(
        self, engine: RecommendationEngine, mock_client: MagicMock
    ) -> None:
        """Client errors become BackendQueryError naming the query purpose."""
        mock_client.query.side_effect = PrometheusConnectionError("refused")

        with pytest.raises(BackendQueryError) as exc_info:
            engine.recommend(_identity("api-1"))

        error = exc_info.value
        assert error.purpose == "memory request"
        assert error.message.startswith("error getting memory request")
        assert error.query is not None
        assert isinstance(error.original_error, PrometheusConnectionError)
        assert len(engine.cache) == 0

    def test_non_vector_result_is_error(
        self, engine: RecommendationEngine, mock_client: MagicMock
    ) -> None:
        """Only instant vectors are accepted."""
        mock_client.query.side_effect = lambda query: QueryResult(result_type="matrix")

        with pytest.raises(BackendQueryError, match="matrix"):
            engine.recommend(_identity("api-1"))

    def test_warnings_do_not_fail(
        self, engine: RecommendationEngine, mock_client: MagicMock
    ) -> None:
        """Server warnings are logged, the value is still used."""
        mock_client.query.side_effect = lambda query: QueryResult(
            result_type="vector",
            samples=[Sample(labels={}, value=0.0, timestamp=0.0)],
            warnings=["PromQL info: metric might not be a counter"],
        )

        recommendation = engine.recommend(_identity("api-1"))

        assert recommendation.cpu_request == "0m"

    def test_template_fallback_uses_pod_key(
        self, engine: RecommendationEngine, mock_client: MagicMock
    ) -> None:
        """Pods without a template are cached per pod."""
        engine.recommend(_identity("bare-1", template=""))
        engine.recommend(_identity("bare-2", template=""))

        assert mock_client.query.call_count == 10
        assert "bare-1:api:prod" in engine.cache
        first_query = mock_client.query.call_args_list[0].args[0]
        assert 'pod="bare-1"' in first_query


@pytest.mark.unit
class TestRecommendMany:
    """Tests for RecommendationEngine.recommend_many."""

    def test_preserves_order(self, engine: RecommendationEngine, mock_client: MagicMock) -> None:
        """Results align with the input identities."""

        def answer(query: str) -> QueryResult:
            if 'pod=~"web-.+"' in query and "container_memory" in query:
                return _vector(1000000.0)
            return _answer(query)

        mock_client.query.side_effect = answer
        identities = [_identity("api-1"), _identity("web-1", template="web-"), _identity("api-2")]

        results = engine.recommend_many(identities)

        assert [r.memory_request for r in results] == ["128Mi", "1Mi", "128Mi"]

    def test_on_done_called_per_identity(self, engine: RecommendationEngine) -> None:
        """Progress callback fires once per container, cache hits included."""
        done: list[str] = []
        identities = [_identity("api-1"), _identity("api-2")]

        engine.recommend_many(identities, on_done=lambda identity: done.append(identity.pod_name))

        assert done == ["api-1", "api-2"]

    def test_threaded_matches_sequential(self, mock_client: MagicMock) -> None:
        """Worker threads give the same results in the same order."""
        builder = QueryBuilder(Strategy.CONSERVATIVE)
        identities = [_identity(f"api-{i}", template=f"t{i % 3}-") for i in range(9)]

        sequential = RecommendationEngine(
            mock_client, builder, GroupingMode.POD_TEMPLATE
        ).recommend_many(identities)
        threaded = RecommendationEngine(
            mock_client, builder, GroupingMode.POD_TEMPLATE
        ).recommend_many(identities, workers=4)

        assert threaded == sequential

    def test_threaded_single_flight_per_key(self, mock_client: MagicMock) -> None:
        """Concurrent lookups of one key query the backend once."""
        lock = threading.Lock()
        calls: list[str] = []

        def slow_answer(query: str) -> QueryResult:
            with lock:
                calls.append(query)
            time.sleep(0.01)
            return _answer(query)

        mock_client.query.side_effect = slow_answer
        engine = RecommendationEngine(
            mock_client, QueryBuilder(Strategy.CONSERVATIVE), GroupingMode.POD_TEMPLATE
        )

        engine.recommend_many([_identity(f"api-{i}") for i in range(8)], workers=4)

        assert len(calls) == 5

    def test_threaded_error_propagates(
        self, engine: RecommendationEngine, mock_client: MagicMock
    ) -> None:
        """The first failure aborts the batch."""
        mock_client.query.side_effect = PrometheusConnectionError("refused")

        with pytest.raises(BackendQueryError):
            engine.recommend_many([_identity("a", "a-"), _identity("b", "b-")], workers=2)
