"""Report service: list containers, select rows, attach recommendations."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn

from k8s_resources_advisor.recommender.filters import RowSelector
from k8s_resources_advisor.recommender.merger import merge_recommendation

if TYPE_CHECKING:
    from k8s_resources_advisor.core.config import AppConfig
    from k8s_resources_advisor.integrations.kubernetes.models import PodResources
    from k8s_resources_advisor.recommender.engine import RecommendationEngine
    from k8s_resources_advisor.recommender.types import Recommendation
    from k8s_resources_advisor.services.workloads import WorkloadLister

logger = structlog.get_logger()


class ReportService:
    """Produce the merged, sorted report records for one run.

    Recommendations are only fetched when an engine is supplied (i.e. a
    Prometheus URL is configured). Any backend error aborts the whole run.
    """

    def __init__(
        self,
        config: AppConfig,
        lister: WorkloadLister,
        engine: RecommendationEngine | None = None,
        console: Console | None = None,
    ) -> None:
        """Initialize the service.

        Raises:
            FilterExpressionError: If the configured filter does not parse.
        """
        self._config = config
        self._lister = lister
        self._engine = engine
        self._console = console or Console(stderr=True)
        self._selector = RowSelector(
            expression=config.filter,
            no_memory_request=config.no_memory_request,
            no_cpu_request=config.no_cpu_request,
            oom_killed=config.oom_killed,
        )

    def build(self, show_progress: bool = True) -> list[PodResources]:
        """Build the report records.

        Args:
            show_progress: Display a progress bar while fetching recommendations.

        Returns:
            Display records sorted by pod name.

        Raises:
            NoPodsFoundError: If the listing is empty.
            KubernetesError: If listing pods fails.
            BackendQueryError: If any recommendation query fails.
        """
        records = self._lister.list_pod_resources(
            namespace=self._config.namespace or None,
            label_selector=self._config.pod_label_selector or None,
        )
        selected = self._selector.select(records)
        logger.info("selected_rows", listed=len(records), selected=len(selected))

        if self._engine is None or not selected:
            merged = [record.model_copy() for record in selected]
        else:
            recommendations = self._recommend(self._engine, selected, show_progress)
            merged = [
                merge_recommendation(record, recommendation, self._config.thresholds)
                for record, recommendation in zip(selected, recommendations, strict=True)
            ]

        return sorted(merged, key=lambda record: record.pod_name)

    def _recommend(
        self,
        engine: RecommendationEngine,
        records: list[PodResources],
        show_progress: bool,
    ) -> list[Recommendation]:
        identities = [record.identity for record in records]
        workers = self._config.workers

        if not show_progress:
            return engine.recommend_many(identities, workers=workers)

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self._console,
            transient=True,
        ) as progress:
            task = progress.add_task("Fetching recommendations", total=len(identities))
            return engine.recommend_many(
                identities,
                workers=workers,
                on_done=lambda _identity: progress.advance(task),
            )
