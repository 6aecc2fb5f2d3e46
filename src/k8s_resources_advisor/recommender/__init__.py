"""Recommendation engine, scorer and result merger.

Only the value types are re-exported here; import the engine, scorer and
merger from their modules.
"""

from k8s_resources_advisor.recommender.types import (
    ContainerIdentity,
    GroupingMode,
    Recommendation,
    RecommendationQuerySet,
    ResourcePlanningDomain,
    ResourcePlanningTier,
    Strategy,
)

__all__ = [
    "ContainerIdentity",
    "GroupingMode",
    "Recommendation",
    "RecommendationQuerySet",
    "ResourcePlanningDomain",
    "ResourcePlanningTier",
    "Strategy",
]
