"""Value types shared by the recommendation engine, scorer and merger."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, StrEnum


class GroupingMode(StrEnum):
    """Dimension along which historical metrics are aggregated."""

    CONTAINER = "container"
    POD = "pod"
    POD_TEMPLATE = "podtemplate"


class Strategy(StrEnum):
    """How limit recommendations are derived.

    Requests always use the median. Conservative limits use the historical
    maximum, aggressive limits the 99th percentile.
    """

    CONSERVATIVE = "conservative"
    AGGRESSIVE = "aggressive"


class ResourcePlanningDomain(StrEnum):
    """Resource kind being scored; selects the absolute-difference thresholds."""

    MEMORY = "memory"
    CPU = "cpu"


class ResourcePlanningTier(IntEnum):
    """How closely a declared request matches the recommended one. Higher is better."""

    UNKNOWN = -1
    BAD = 0
    GOOD = 1
    PERFECT = 2
    GENIUS = 3
    EXACT = 4

    @property
    def stars(self) -> str:
        """Star-count representation; empty for UNKNOWN and BAD."""
        return "*" * max(int(self), 0)


@dataclass(frozen=True)
class ContainerIdentity:
    """Identifies one container for a recommendation lookup.

    ``pod_template_name`` is empty when the pod has no owning template
    (bare pods, static pods).
    """

    container_name: str
    pod_name: str
    namespace: str
    pod_template_name: str = ""


@dataclass(frozen=True)
class RecommendationQuerySet:
    """The five rendered metric queries for one lookup."""

    memory_request: str
    memory_limit: str
    cpu_request: str
    cpu_limit: str
    oom_kill_count: str


@dataclass(frozen=True)
class Recommendation:
    """Usage-based recommendation for one cache key.

    Quantity fields are formatted quantity strings, empty when the backend
    returned no unambiguous data for them.
    """

    memory_request: str = ""
    memory_limit: str = ""
    cpu_request: str = ""
    cpu_limit: str = ""
    oom_killed: bool = False
