"""Main CLI entry point using Typer."""

from __future__ import annotations

import typer
from rich.console import Console

from k8s_resources_advisor import __version__
from k8s_resources_advisor.cli.commands import config, report, score
from k8s_resources_advisor.logging.config import configure_logging

app = typer.Typer(
    name="k8s-resources",
    help="Kubernetes container resources with usage-based recommendations.",
    add_completion=True,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"k8s-resources version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode (logs every query).",
    ),
    log_json: bool = typer.Option(
        False,
        "--log-json",
        help="Write console logs as JSON.",
    ),
) -> None:
    """Report Kubernetes container requests and limits next to what usage suggests."""
    configure_logging(verbose=verbose, debug=debug, json_output=log_json)
    ctx.obj = {"debug": debug}


app.command()(report.report)
app.command()(score.score)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
