"""Unit tests for report formatters."""

from __future__ import annotations

import io
import json
from typing import Any

import pytest
import yaml
from rich.console import Console

from k8s_resources_advisor.cli.formatters import (
    BASE_COLUMNS,
    JsonFormatter,
    OutputFormat,
    TableFormatter,
    YamlFormatter,
    get_formatter,
    render_result_text,
    report_columns,
    report_rows,
)
from k8s_resources_advisor.core.config import AppConfig


def _console() -> tuple[Console, io.StringIO]:
    output = io.StringIO()
    return Console(file=output, width=200, force_terminal=False), output


@pytest.mark.unit
class TestReportColumns:
    """Tests for report_columns."""

    def test_base_columns(self) -> None:
        """Default report has the six base columns."""
        assert report_columns(AppConfig()) == BASE_COLUMNS
        assert [header for _, header in BASE_COLUMNS] == [
            "PodName",
            "ContainerName",
            "MemoryRequest",
            "MemoryLimit",
            "CPURequest",
            "CPULimit",
        ]

    def test_optional_columns_in_order(self) -> None:
        """QoS, SafeToEvict and Debug are appended in that order."""
        config = AppConfig(show_qos=True, show_safe_to_evict=True, show_debug_json=True)

        headers = [header for _, header in report_columns(config)]

        assert headers[6:] == ["QoS", "SafeToEvict", "Debug"]


@pytest.mark.unit
class TestReportRows:
    """Tests for row rendering."""

    def test_bool_and_debug_cells(self, make_record: Any) -> None:
        """Booleans render as true/false; the debug cell is the record as JSON."""
        record = make_record(safe_to_evict=True)
        columns = [("safe_to_evict", "SafeToEvict"), ("", "Debug")]

        [[safe, debug]] = report_rows([record], columns)

        assert safe == "true"
        assert json.loads(debug)["PodName"] == record.pod_name

    def test_render_result_text(self, make_record: Any) -> None:
        """The result file holds the header, separator and one line per record."""
        text = render_result_text([make_record(), make_record(pod_name="b")], BASE_COLUMNS)

        lines = text.splitlines()
        assert lines[0].startswith("PodName")
        assert lines[1].startswith("------")
        assert len(lines) == 4


@pytest.mark.unit
class TestFormatters:
    """Tests for the formatter classes."""

    def test_get_formatter(self) -> None:
        """Factory returns the matching class."""
        assert isinstance(get_formatter(OutputFormat.TABLE), TableFormatter)
        assert isinstance(get_formatter(OutputFormat.JSON), JsonFormatter)
        assert isinstance(get_formatter(OutputFormat.YAML), YamlFormatter)

    def test_table(self, make_record: Any) -> None:
        """Table output shows headers, cells and a total."""
        console, output = _console()

        TableFormatter(console).format_report(
            [make_record(memory_limit="256Mi / 300Mi OOMKilled", oom_killed=True)], BASE_COLUMNS
        )

        text = output.getvalue()
        assert "PodName" in text
        assert "256Mi / 300Mi OOMKilled" in text
        assert "Total: 1 containers" in text

    def test_table_escapes_markup(self, make_record: Any) -> None:
        """Cell values are printed literally."""
        console, output = _console()

        TableFormatter(console).format_report([make_record(pod_name="[bold]x")], BASE_COLUMNS)

        assert "[bold]x" in output.getvalue()

    def test_json(self, make_record: Any) -> None:
        """JSON output uses column names as keys."""
        console, output = _console()

        JsonFormatter(console).format_report([make_record()], BASE_COLUMNS)

        data = json.loads(output.getvalue())
        assert data["total"] == 1
        assert data["data"][0]["MemoryRequest"] == "128Mi"

    def test_yaml(self, make_record: Any) -> None:
        """YAML output is a list of records."""
        console, output = _console()

        YamlFormatter(console).format_report([make_record()], BASE_COLUMNS)

        data = yaml.safe_load(output.getvalue())
        assert data[0]["CPULimit"] == "500m"
