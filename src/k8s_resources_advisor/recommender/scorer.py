"""Resource-planning scorer.

Classifies how closely a declared request matches a recommended one. Rules
are evaluated in order and the first match wins:

1. either value empty -> UNKNOWN
2. recommended / actual == 1 -> EXACT
3. ratio inside the band (0.8..1.2 by default) -> GENIUS
4. absolute difference below the domain's "perfect" threshold -> PERFECT
5. absolute difference below the domain's "good" threshold -> GOOD
6. otherwise -> BAD

The ratio band catches proportionally well-sized requests at any
magnitude; the absolute bands catch small values where a large ratio is
negligible in practice (1Mi vs 2Mi).
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from k8s_resources_advisor.exceptions import ScoringError
from k8s_resources_advisor.recommender.types import (
    ResourcePlanningDomain,
    ResourcePlanningTier,
)
from k8s_resources_advisor.recommender.units import parse_quantity


class ScoringThresholds(BaseModel):
    """Tunable scorer thresholds.

    Attributes:
        ratio_low: Lower bound of the GENIUS ratio band (inclusive).
        ratio_high: Upper bound of the GENIUS ratio band (inclusive).
        memory_perfect: Memory difference below which a request is PERFECT.
        memory_good: Memory difference below which a request is GOOD.
        cpu_perfect: CPU difference below which a request is PERFECT.
        cpu_good: CPU difference below which a request is GOOD.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    ratio_low: float = 0.8
    ratio_high: float = 1.2
    memory_perfect: str = "10Mi"
    memory_good: str = "100Mi"
    cpu_perfect: str = "10m"
    cpu_good: str = "20m"

    @field_validator("memory_perfect", "memory_good", "cpu_perfect", "cpu_good")
    @classmethod
    def validate_quantity(cls, v: str) -> str:
        """Validate thresholds are parseable quantities."""
        try:
            parse_quantity(v)
        except ScoringError as e:
            raise ValueError(f"invalid quantity: {v!r}") from e
        return v

    @model_validator(mode="after")
    def validate_bands(self) -> ScoringThresholds:
        """Validate the ratio band contains 1 and each good threshold covers perfect."""
        if not 0 < self.ratio_low <= 1 <= self.ratio_high:
            raise ValueError("ratio band must satisfy 0 < ratio_low <= 1 <= ratio_high")
        if parse_quantity(self.memory_perfect) > parse_quantity(self.memory_good):
            raise ValueError("memory_perfect must not exceed memory_good")
        if parse_quantity(self.cpu_perfect) > parse_quantity(self.cpu_good):
            raise ValueError("cpu_perfect must not exceed cpu_good")
        return self

    def absolute_bands(self, domain: ResourcePlanningDomain) -> tuple[Decimal, Decimal]:
        """Return the (perfect, good) absolute-difference thresholds for a domain."""
        match domain:
            case ResourcePlanningDomain.MEMORY:
                return parse_quantity(self.memory_perfect), parse_quantity(self.memory_good)
            case ResourcePlanningDomain.CPU:
                return parse_quantity(self.cpu_perfect), parse_quantity(self.cpu_good)


DEFAULT_THRESHOLDS = ScoringThresholds()


def score_resource_planning(
    domain: ResourcePlanningDomain,
    actual: str,
    recommended: str,
    thresholds: ScoringThresholds = DEFAULT_THRESHOLDS,
) -> ResourcePlanningTier:
    """Score a declared quantity against a recommended one.

    Args:
        domain: Which absolute thresholds apply (memory or CPU).
        actual: Declared quantity string, e.g. ``"128Mi"``.
        recommended: Recommended quantity string.
        thresholds: Ratio band and absolute-difference thresholds.

    Returns:
        The matching tier; UNKNOWN if either value is empty.

    Raises:
        ScoringError: If a non-empty value is not a valid quantity.
    """
    if not actual or not recommended:
        return ResourcePlanningTier.UNKNOWN

    actual_value = parse_quantity(actual)
    recommended_value = parse_quantity(recommended)

    if recommended_value == actual_value:
        return ResourcePlanningTier.EXACT

    # A zero request has no meaningful ratio; only the absolute bands apply
    if actual_value != 0:
        ratio = recommended_value / actual_value
        if Decimal(str(thresholds.ratio_low)) <= ratio <= Decimal(str(thresholds.ratio_high)):
            return ResourcePlanningTier.GENIUS

    perfect, good = thresholds.absolute_bands(domain)
    difference = abs(recommended_value - actual_value)

    if difference < perfect:
        return ResourcePlanningTier.PERFECT
    if difference < good:
        return ResourcePlanningTier.GOOD
    return ResourcePlanningTier.BAD
