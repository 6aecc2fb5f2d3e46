"""Centralized CLI output utilities.

Usage:
    from k8s_resources_advisor.cli.output import Table

    table = Table(title="Resources")
    table.add_column("PodName", style="cyan")
    table.add_row("api-7d9f8-abcde")
    console.print(table)
"""

from k8s_resources_advisor.cli.output.plain import render_plain_table
from k8s_resources_advisor.cli.output.table import Table

__all__ = ["Table", "render_plain_table"]
