"""Shared CLI options and error handling."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, NoReturn

import typer
from rich.console import Console

from k8s_resources_advisor.cli.formatters import OutputFormat
from k8s_resources_advisor.exceptions import (
    AdvisorError,
    BackendQueryError,
    ConfigurationError,
    FilterExpressionError,
    NoPodsFoundError,
)
from k8s_resources_advisor.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
)

# Errors go to stderr so stdout stays parseable for -o json/yaml
err_console = Console(stderr=True)


# =============================================================================
# Common Typer Option Annotations
# =============================================================================

ConfigFileOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="YAML config file",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
]

OutputOption = Annotated[
    OutputFormat,
    typer.Option(
        "--output",
        "-o",
        help="Output format: table, json, or yaml",
        case_sensitive=False,
    ),
]

NamespaceOption = Annotated[
    str | None,
    typer.Option(
        "--namespace",
        "-n",
        help="Namespace to report on (default: all namespaces)",
    ),
]

LabelSelectorOption = Annotated[
    str | None,
    typer.Option(
        "--selector",
        "-l",
        help="Pod label selector (e.g., 'app=api,tier=backend')",
    ),
]


# =============================================================================
# Error Handling
# =============================================================================


def handle_error(error: AdvisorError | KubernetesError) -> NoReturn:
    """Print a user-friendly message for a fatal error and exit.

    Args:
        error: The error that aborted the run.

    Raises:
        typer.Exit: Always exits with code 1.
    """
    if isinstance(error, ConfigurationError | FilterExpressionError):
        err_console.print(f"[red]Error in config:[/red] {error.message}")

    elif isinstance(error, BackendQueryError):
        err_console.print(f"[red]Error:[/red] Prometheus query failed, {error.message}")
        if error.query:
            err_console.print(f"  Query: {error.query}", markup=False)
        err_console.print(
            "\n[dim]Hint: Check --prometheus-url, credentials and that the "
            "Prometheus server is reachable.[/dim]"
        )

    elif isinstance(error, NoPodsFoundError):
        err_console.print(f"[yellow]{error.message}[/yellow]")

    elif isinstance(error, KubernetesConnectionError):
        err_console.print("[red]Error:[/red] Cannot connect to Kubernetes cluster")
        err_console.print(f"  {error.message}")
        if error.original_error:
            err_console.print(f"  Cause: {error.original_error}", markup=False)
        err_console.print(
            "\n[dim]Hint: Check that your kubeconfig is valid and the cluster is reachable.[/dim]"
        )

    elif isinstance(error, KubernetesAuthError):
        err_console.print("[red]Error:[/red] Authentication/authorization failed")
        err_console.print(f"  {error.message}")
        err_console.print("\n[dim]Hint: The report needs permission to list pods.[/dim]")

    elif isinstance(error, KubernetesNotFoundError):
        err_console.print(f"[red]Error:[/red] {error.message}")

    else:
        err_console.print(f"[red]Error:[/red] {error}")

    raise typer.Exit(1)
