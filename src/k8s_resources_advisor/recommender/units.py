"""Quantity formatting and parsing.

Formatting produces the strings shown to users for recommended values;
parsing follows Kubernetes quantity semantics (binary ``Ki``/``Mi``/``Gi``
suffixes, decimal ``k``/``M``/``G`` suffixes, ``m`` for milli).
"""

from __future__ import annotations

from decimal import Decimal

from kubernetes.utils import parse_quantity as _k8s_parse_quantity

from k8s_resources_advisor.exceptions import ScoringError

SI_BASE = 1000
SI_PREFIXES = "KMGTPE"


def format_bytes_si(value: int) -> str:
    """Format a byte count with 1000-based steps and binary-style suffixes.

    Steps are powers of 1000 while the suffix reads ``Ki``/``Mi``/...; an
    exact ``.00`` fraction is dropped. Values below 1000 keep the ``m``
    suffix used for raw counts.

    Examples:
        >>> format_bytes_si(100)
        '100m'
        >>> format_bytes_si(1200000)
        '1.20Mi'
        >>> format_bytes_si(13000000)
        '13Mi'
    """
    if value < SI_BASE:
        return f"{value}m"

    div, exp = SI_BASE, 0
    n = value // SI_BASE
    while n >= SI_BASE and exp < len(SI_PREFIXES) - 1:
        div *= SI_BASE
        exp += 1
        n //= SI_BASE

    return f"{value / div:.2f}{SI_PREFIXES[exp]}i".replace(".00", "")


def format_millicores(cores: float) -> str:
    """Format a CPU core count as whole millicores, e.g. ``0.25`` -> ``'250m'``."""
    return f"{cores * 1000:.0f}m".replace(".00", "")


def parse_quantity(value: str) -> Decimal:
    """Parse a quantity string into its value in base units.

    Args:
        value: Quantity string such as ``"128Mi"`` or ``"250m"``.

    Returns:
        The quantity as a Decimal (bytes for memory, cores for CPU).

    Raises:
        ScoringError: If the string is not a valid quantity.
    """
    try:
        parsed = Decimal(_k8s_parse_quantity(value.strip()))
    except (ValueError, TypeError, ArithmeticError) as e:
        raise ScoringError(value, original_error=e) from e
    if not parsed.is_finite():
        raise ScoringError(value)
    return parsed
