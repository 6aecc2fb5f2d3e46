"""Config commands."""

from __future__ import annotations

import typer
from rich.console import Console

from k8s_resources_advisor.cli.options import ConfigFileOption, handle_error
from k8s_resources_advisor.core.config import load_config
from k8s_resources_advisor.exceptions import AdvisorError

app = typer.Typer(help="Inspect configuration.")
console = Console()


@app.command("show")
def show(config_file: ConfigFileOption = None) -> None:
    """Print the effective configuration (file + environment) as YAML."""
    try:
        config = load_config(config_file)
    except AdvisorError as e:
        handle_error(e)

    console.print(config.to_yaml(), markup=False, highlight=False)
