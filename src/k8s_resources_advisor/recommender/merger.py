"""Combine declared resources with a recommendation into the display record."""

from __future__ import annotations

from k8s_resources_advisor.integrations.kubernetes.models import PodResources
from k8s_resources_advisor.recommender.scorer import (
    DEFAULT_THRESHOLDS,
    ScoringThresholds,
    score_resource_planning,
)
from k8s_resources_advisor.recommender.types import (
    Recommendation,
    ResourcePlanningDomain,
    ResourcePlanningTier,
)

OK_MARKER = "OK"
OOM_KILLED_MARKER = "OOMKilled"
UNSET_QUANTITY = "0"


def _pair(actual: str, recommended: str) -> str:
    if not recommended:
        return actual
    return f"{actual or UNSET_QUANTITY} / {recommended}"


def merge_recommendation(
    record: PodResources,
    recommendation: Recommendation | None,
    thresholds: ScoringThresholds = DEFAULT_THRESHOLDS,
) -> PodResources:
    """Render a record's quantity fields against its recommendation.

    Each quantity becomes ``"<actual> / <recommended>"`` where a
    recommendation exists. OOMKilled is the OR of the live status and the
    historical signal, and marks the memory limit. Requests that score GOOD
    or better get an ``OK`` suffix; the memory request is not scored for an
    OOM-killed container. Limits are never scored.

    Args:
        record: Declared resources as listed from the cluster.
        recommendation: Recommendation for the record, or None.
        thresholds: Scorer thresholds.

    Returns:
        A new record; ``record`` itself is left untouched.

    Raises:
        ScoringError: If a quantity string cannot be parsed.
    """
    if recommendation is None:
        return record.model_copy()

    oom_killed = record.oom_killed or recommendation.oom_killed

    memory_request = _pair(record.memory_request, recommendation.memory_request)
    memory_limit = _pair(record.memory_limit, recommendation.memory_limit)
    cpu_request = _pair(record.cpu_request, recommendation.cpu_request)
    cpu_limit = _pair(record.cpu_limit, recommendation.cpu_limit)

    if oom_killed:
        memory_limit = f"{memory_limit} {OOM_KILLED_MARKER}".lstrip()
    else:
        memory_tier = score_resource_planning(
            ResourcePlanningDomain.MEMORY,
            record.memory_request,
            recommendation.memory_request,
            thresholds,
        )
        if memory_tier >= ResourcePlanningTier.GOOD:
            memory_request = f"{memory_request} {OK_MARKER}"

    cpu_tier = score_resource_planning(
        ResourcePlanningDomain.CPU,
        record.cpu_request,
        recommendation.cpu_request,
        thresholds,
    )
    if cpu_tier >= ResourcePlanningTier.GOOD:
        cpu_request = f"{cpu_request} {OK_MARKER}"

    return record.model_copy(
        update={
            "memory_request": memory_request,
            "memory_limit": memory_limit,
            "cpu_request": cpu_request,
            "cpu_limit": cpu_limit,
            "oom_killed": oom_killed,
        }
    )
