"""Score command: rate a declared request against a recommended one."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from k8s_resources_advisor.cli.options import ConfigFileOption, handle_error
from k8s_resources_advisor.core.config import load_config
from k8s_resources_advisor.exceptions import AdvisorError
from k8s_resources_advisor.recommender.scorer import score_resource_planning
from k8s_resources_advisor.recommender.types import ResourcePlanningDomain

console = Console()


def score(
    domain: Annotated[
        ResourcePlanningDomain,
        typer.Argument(help="Resource kind: memory or cpu", case_sensitive=False),
    ],
    actual: Annotated[str, typer.Argument(help="Declared quantity, e.g. 128Mi or 250m")],
    recommended: Annotated[str, typer.Argument(help="Recommended quantity")],
    config_file: ConfigFileOption = None,
) -> None:
    """Score how well ACTUAL matches RECOMMENDED (EXACT, GENIUS, PERFECT, GOOD, BAD)."""
    try:
        thresholds = load_config(config_file).thresholds
        tier = score_resource_planning(domain, actual, recommended, thresholds)
    except AdvisorError as e:
        handle_error(e)

    stars = tier.stars or "-"
    console.print(f"[bold]{tier.name}[/bold] ({int(tier)}) {stars}", highlight=False)
