"""Unit tests for the resource-planning scorer."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from k8s_resources_advisor.exceptions import ScoringError
from k8s_resources_advisor.recommender.scorer import (
    DEFAULT_THRESHOLDS,
    ScoringThresholds,
    score_resource_planning,
)
from k8s_resources_advisor.recommender.types import (
    ResourcePlanningDomain,
    ResourcePlanningTier,
)

MEMORY = ResourcePlanningDomain.MEMORY
CPU = ResourcePlanningDomain.CPU


@pytest.mark.unit
class TestScoreResourcePlanning:
    """Tests for score_resource_planning."""

    @pytest.mark.parametrize(
        ("domain", "actual", "recommended", "expected"),
        [
            (MEMORY, "128Mi", "128Mi", ResourcePlanningTier.EXACT),
            (MEMORY, "1Gi", "1024Mi", ResourcePlanningTier.EXACT),
            (CPU, "0", "0", ResourcePlanningTier.EXACT),
            (MEMORY, "100Mi", "110Mi", ResourcePlanningTier.GENIUS),
            (MEMORY, "100Mi", "80Mi", ResourcePlanningTier.GENIUS),
            (MEMORY, "100Mi", "120Mi", ResourcePlanningTier.GENIUS),
            (MEMORY, "1Mi", "5Mi", ResourcePlanningTier.PERFECT),
            (MEMORY, "10Mi", "60Mi", ResourcePlanningTier.GOOD),
            (MEMORY, "100Mi", "500Mi", ResourcePlanningTier.BAD),
            (CPU, "100m", "110m", ResourcePlanningTier.GENIUS),
            (CPU, "10m", "15m", ResourcePlanningTier.PERFECT),
            (CPU, "10m", "25m", ResourcePlanningTier.GOOD),
            (CPU, "100m", "500m", ResourcePlanningTier.BAD),
        ],
    )
    def test_tiers(
        self,
        domain: ResourcePlanningDomain,
        actual: str,
        recommended: str,
        expected: ResourcePlanningTier,
    ) -> None:
        """Each rule is reached in order, first match wins."""
        assert score_resource_planning(domain, actual, recommended) == expected

    @pytest.mark.parametrize(("actual", "recommended"), [("", "128Mi"), ("128Mi", ""), ("", "")])
    def test_empty_value_is_unknown(self, actual: str, recommended: str) -> None:
        """A missing side cannot be scored."""
        assert score_resource_planning(MEMORY, actual, recommended) == ResourcePlanningTier.UNKNOWN

    def test_ratio_band_is_inclusive_only_inside(self) -> None:
        """Just outside the band falls through to the absolute thresholds."""
        assert score_resource_planning(MEMORY, "1000Mi", "1210Mi") == ResourcePlanningTier.BAD
        assert score_resource_planning(MEMORY, "1000Mi", "790Mi") == ResourcePlanningTier.BAD

    def test_absolute_thresholds_are_strict(self) -> None:
        """A difference equal to a threshold does not qualify for it."""
        assert score_resource_planning(CPU, "10m", "20m") == ResourcePlanningTier.GOOD
        assert score_resource_planning(CPU, "10m", "30m") == ResourcePlanningTier.BAD

    def test_zero_actual_skips_ratio(self) -> None:
        """A zero request is only compared by absolute difference."""
        assert score_resource_planning(MEMORY, "0", "5Mi") == ResourcePlanningTier.PERFECT
        assert score_resource_planning(CPU, "0", "500m") == ResourcePlanningTier.BAD

    def test_exact_is_symmetric(self) -> None:
        """Equal quantities written differently score EXACT both ways."""
        assert score_resource_planning(CPU, "1", "1000m") == ResourcePlanningTier.EXACT
        assert score_resource_planning(CPU, "1000m", "1") == ResourcePlanningTier.EXACT

    def test_larger_difference_never_scores_higher(self) -> None:
        """Moving the recommendation away from a fixed request never improves the tier."""
        recommendations = ["100Mi", "110Mi", "130Mi", "150Mi", "250Mi", "1Gi"]
        tiers = [score_resource_planning(MEMORY, "100Mi", rec) for rec in recommendations]

        assert tiers == sorted(tiers, reverse=True)

    def test_invalid_quantity_raises(self) -> None:
        """Unparseable input is an error, not BAD."""
        with pytest.raises(ScoringError):
            score_resource_planning(MEMORY, "lots", "128Mi")

    def test_custom_thresholds(self) -> None:
        """Tunable thresholds change the outcome."""
        strict = ScoringThresholds(ratio_low=0.95, ratio_high=1.05)

        assert score_resource_planning(MEMORY, "100Mi", "108Mi") == ResourcePlanningTier.GENIUS
        tier = score_resource_planning(MEMORY, "100Mi", "108Mi", strict)
        assert tier == ResourcePlanningTier.PERFECT


@pytest.mark.unit
class TestScoringThresholds:
    """Tests for ScoringThresholds validation."""

    def test_defaults(self) -> None:
        """Defaults mirror the built-in bands."""
        assert DEFAULT_THRESHOLDS.ratio_low == 0.8
        assert DEFAULT_THRESHOLDS.ratio_high == 1.2
        assert DEFAULT_THRESHOLDS.memory_perfect == "10Mi"
        assert DEFAULT_THRESHOLDS.memory_good == "100Mi"
        assert DEFAULT_THRESHOLDS.cpu_perfect == "10m"
        assert DEFAULT_THRESHOLDS.cpu_good == "20m"

    def test_invalid_quantity_rejected(self) -> None:
        """Threshold quantities must parse."""
        with pytest.raises(ValidationError, match="invalid quantity"):
            ScoringThresholds(memory_good="plenty")

    @pytest.mark.parametrize(("low", "high"), [(0.0, 1.2), (1.1, 1.2), (0.8, 0.9)])
    def test_ratio_band_must_contain_one(self, low: float, high: float) -> None:
        """The ratio band has to include 1."""
        with pytest.raises(ValidationError, match="ratio band"):
            ScoringThresholds(ratio_low=low, ratio_high=high)

    def test_perfect_must_not_exceed_good(self) -> None:
        """Perfect threshold is the tighter one."""
        with pytest.raises(ValidationError, match="cpu_perfect"):
            ScoringThresholds(cpu_perfect="50m", cpu_good="20m")

    def test_unknown_keys_rejected(self) -> None:
        """Extra keys are forbidden."""
        with pytest.raises(ValidationError):
            ScoringThresholds.model_validate({"ratio_mid": 1.0})

    def test_absolute_bands(self) -> None:
        """absolute_bands returns the domain's parsed thresholds."""
        perfect, good = DEFAULT_THRESHOLDS.absolute_bands(CPU)

        assert perfect == Decimal("0.01")
        assert good > perfect


@pytest.mark.unit
class TestResourcePlanningTier:
    """Tests for tier ordering and star rendering."""

    def test_ordering(self) -> None:
        """Higher tiers compare greater."""
        assert (
            ResourcePlanningTier.UNKNOWN
            < ResourcePlanningTier.BAD
            < ResourcePlanningTier.GOOD
            < ResourcePlanningTier.PERFECT
            < ResourcePlanningTier.GENIUS
            < ResourcePlanningTier.EXACT
        )

    def test_stars(self) -> None:
        """Stars count the tier value; UNKNOWN and BAD have none."""
        assert ResourcePlanningTier.EXACT.stars == "****"
        assert ResourcePlanningTier.GOOD.stars == "*"
        assert ResourcePlanningTier.BAD.stars == ""
        assert ResourcePlanningTier.UNKNOWN.stars == ""
