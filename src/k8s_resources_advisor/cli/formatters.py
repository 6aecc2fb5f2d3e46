"""Output formatters for the resource report.

Implements the Strategy pattern for output formatting, so the report can
be printed as a table, JSON or YAML.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import yaml
from rich.console import Console
from rich.markup import escape

from k8s_resources_advisor.cli.output import Table, render_plain_table

if TYPE_CHECKING:
    from k8s_resources_advisor.core.config import AppConfig
    from k8s_resources_advisor.integrations.kubernetes.models import PodResources


class OutputFormat(StrEnum):
    """Supported output formats."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"


DEBUG_COLUMN = "Debug"

BASE_COLUMNS: list[tuple[str, str]] = [
    ("pod_name", "PodName"),
    ("container_name", "ContainerName"),
    ("memory_request", "MemoryRequest"),
    ("memory_limit", "MemoryLimit"),
    ("cpu_request", "CPURequest"),
    ("cpu_limit", "CPULimit"),
]


def report_columns(config: AppConfig) -> list[tuple[str, str]]:
    """Return (field, header) pairs for the configured report columns."""
    columns = list(BASE_COLUMNS)
    if config.show_qos:
        columns.append(("qos", "QoS"))
    if config.show_safe_to_evict:
        columns.append(("safe_to_evict", "SafeToEvict"))
    if config.show_debug_json:
        columns.append(("", DEBUG_COLUMN))
    return columns


def _cell(record: PodResources, field_name: str) -> str:
    if not field_name:
        return record.model_dump_json(by_alias=True)
    value = getattr(record, field_name)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def report_rows(
    records: Sequence[PodResources], columns: list[tuple[str, str]]
) -> list[list[str]]:
    """Render records as rows of cell strings."""
    return [[_cell(record, field_name) for field_name, _ in columns] for record in records]


def render_result_text(records: Sequence[PodResources], columns: list[tuple[str, str]]) -> str:
    """Render the plain-text table written to the result file."""
    return render_plain_table([header for _, header in columns], report_rows(records, columns))


class ReportFormatter(ABC):
    """Abstract base class for report formatters."""

    def __init__(self, console: Console) -> None:
        self.console = console

    @abstractmethod
    def format_report(
        self,
        records: Sequence[PodResources],
        columns: list[tuple[str, str]],
        title: str = "",
    ) -> None:
        """Format and display the report."""


class TableFormatter(ReportFormatter):
    """Rich table output formatter."""

    def format_report(
        self,
        records: Sequence[PodResources],
        columns: list[tuple[str, str]],
        title: str = "",
    ) -> None:
        table = Table(title=title or None, show_header=True)
        for field_name, header in columns:
            table.add_column(header, style="cyan" if field_name == "pod_name" else None)

        for record, row in zip(records, report_rows(records, columns), strict=True):
            cells = [escape(cell) for cell in row]
            if record.oom_killed:
                cells[3] = f"[red]{cells[3]}[/red]"
            table.add_row(*cells)

        self.console.print(table)
        self.console.print(f"\n[dim]Total: {len(records)} containers[/dim]")


def _records_data(records: Sequence[PodResources]) -> list[dict[str, Any]]:
    return [record.model_dump(by_alias=True) for record in records]


class JsonFormatter(ReportFormatter):
    """JSON output formatter."""

    def format_report(
        self,
        records: Sequence[PodResources],
        columns: list[tuple[str, str]],
        title: str = "",
    ) -> None:
        output = {"data": _records_data(records), "total": len(records)}
        self.console.print_json(json.dumps(output, default=str))


class YamlFormatter(ReportFormatter):
    """YAML output formatter."""

    def format_report(
        self,
        records: Sequence[PodResources],
        columns: list[tuple[str, str]],
        title: str = "",
    ) -> None:
        self.console.print(
            yaml.safe_dump(_records_data(records), default_flow_style=False, sort_keys=False),
            markup=False,
            highlight=False,
        )


def get_formatter(format_type: OutputFormat, console: Console | None = None) -> ReportFormatter:
    """Factory function to get the appropriate formatter."""
    if console is None:
        console = Console()

    formatters: dict[OutputFormat, type[ReportFormatter]] = {
        OutputFormat.TABLE: TableFormatter,
        OutputFormat.JSON: JsonFormatter,
        OutputFormat.YAML: YamlFormatter,
    }

    formatter_class = formatters.get(format_type, TableFormatter)
    return formatter_class(console)
