"""Row selection for the report.

A filter expression is a comma-separated list of ``Field==value``
conditions; a row matches if any condition holds. Field names are the
record's column names (``PodName``, optionally written ``.PodName``) or
their snake_case attribute names. Booleans compare as ``true``/``false``.
"""

from __future__ import annotations

from dataclasses import dataclass

from k8s_resources_advisor.exceptions import FilterExpressionError
from k8s_resources_advisor.integrations.kubernetes.models import PodResources
from k8s_resources_advisor.recommender.units import parse_quantity

CONDITION_SEPARATOR = ","
EQUALS = "=="


def _field_lookup() -> dict[str, str]:
    """Map column names and attribute names to attribute names."""
    lookup: dict[str, str] = {}
    for name, info in PodResources.model_fields.items():
        lookup[name] = name
        if info.alias:
            lookup[info.alias] = name
    return lookup


_FIELD_NAMES = _field_lookup()
_COLUMN_NAMES = sorted(info.alias or name for name, info in PodResources.model_fields.items())


@dataclass(frozen=True)
class Condition:
    """One ``field == value`` test."""

    field: str
    value: str

    def matches(self, record: PodResources) -> bool:
        actual = getattr(record, self.field)
        if isinstance(actual, bool):
            return ("true" if actual else "false") == self.value.lower()
        return str(actual) == self.value


def parse_filter(expression: str) -> list[Condition]:
    """Parse a filter expression into conditions.

    Args:
        expression: e.g. ``".Namespace==prod,.QoS==BestEffort"``.

    Returns:
        Parsed conditions; empty for an empty expression.

    Raises:
        FilterExpressionError: If a condition is malformed or names an
            unknown field.
    """
    conditions: list[Condition] = []
    if not expression.strip():
        return conditions

    for raw in expression.split(CONDITION_SEPARATOR):
        parts = raw.split(EQUALS)
        if len(parts) != 2:
            raise FilterExpressionError(
                f"invalid filter condition: {raw!r}, it must be .Field==value"
            )
        name = parts[0].strip().removeprefix(".")
        field = _FIELD_NAMES.get(name)
        if field is None:
            raise FilterExpressionError(
                f"unknown filter field {name!r}; known fields: {', '.join(_COLUMN_NAMES)}"
            )
        conditions.append(Condition(field=field, value=parts[1].strip()))

    return conditions


def _unset(quantity: str) -> bool:
    return not quantity or parse_quantity(quantity) == 0


class RowSelector:
    """Decide which records appear in the report.

    With no selector enabled every record is shown. Otherwise a record is
    shown when any enabled selector matches it.
    """

    def __init__(
        self,
        expression: str = "",
        no_memory_request: bool = False,
        no_cpu_request: bool = False,
        oom_killed: bool = False,
    ) -> None:
        """Initialize the selector.

        Raises:
            FilterExpressionError: If ``expression`` does not parse.
        """
        self.conditions = parse_filter(expression)
        self.no_memory_request = no_memory_request
        self.no_cpu_request = no_cpu_request
        self.oom_killed = oom_killed

    @property
    def selects_all(self) -> bool:
        """True when no selector is enabled."""
        return not (
            self.conditions or self.no_memory_request or self.no_cpu_request or self.oom_killed
        )

    def matches(self, record: PodResources) -> bool:
        """Return True if ``record`` should be shown."""
        if self.selects_all:
            return True
        if any(condition.matches(record) for condition in self.conditions):
            return True
        if self.no_memory_request and _unset(record.memory_request):
            return True
        if self.no_cpu_request and _unset(record.cpu_request):
            return True
        return self.oom_killed and record.oom_killed

    def select(self, records: list[PodResources]) -> list[PodResources]:
        """Return the records to show, preserving order."""
        return [record for record in records if self.matches(record)]
