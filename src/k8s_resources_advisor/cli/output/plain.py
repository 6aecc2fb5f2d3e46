"""Plain-text table rendering for the result file."""

from __future__ import annotations

import io
from collections.abc import Sequence

from rich import box
from rich.cells import cell_len
from rich.console import Console
from rich.markup import escape

from k8s_resources_advisor.cli.output.table import Table

SEPARATOR_CELL = "------"


def render_plain_table(header: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Render rows as a padded, pipe-delimited text table.

    The first line is the header, the second a row of ``------`` cells,
    followed by one line per row. Every column is padded to its widest cell
    and columns are joined by ``" | "``. Rendering goes through the same
    rich ``Table`` as the terminal output, drawn with ASCII rules and no
    outer edge.

    Args:
        header: Column titles.
        rows: Row cells; each row must have as many cells as the header.

    Returns:
        The table text, newline terminated.

    Raises:
        ValueError: If a row's width differs from the header's.
    """
    lines = [list(header), [SEPARATOR_CELL] * len(header)]
    for row in rows:
        if len(row) != len(header):
            raise ValueError(f"row has {len(row)} cells, expected {len(header)}")
        lines.append(list(row))

    table = Table(box=box.ASCII, show_header=False, show_edge=False, pad_edge=False)
    for _ in header:
        table.add_column(no_wrap=True)
    for line in lines:
        table.add_row(*(escape(cell) for cell in line))

    # Wide enough that no column is ever folded.
    width = sum(max(cell_len(line[i]) for line in lines) + 3 for i in range(len(header)))
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        color_system=None,
        width=max(width, 1),
        emoji=False,
        highlight=False,
    )
    console.print(table)
    rendered = buffer.getvalue().splitlines()
    return "\n".join(line.rstrip() for line in rendered) + "\n"
