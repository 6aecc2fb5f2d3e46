"""Rich table with wrapping defaults for the resource report."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from rich.table import Table as RichTable

if TYPE_CHECKING:
    from rich.console import ConsoleRenderable, RichCast

OverflowMethod = Literal["fold", "crop", "ellipsis", "ignore"]


class Table(RichTable):
    """Rich Table whose columns fold long cells instead of truncating them.

    Report rows carry "actual / recommended" pairs that easily exceed the
    terminal width, and a cropped quantity is worse than a wrapped one.

    Usage:
        from k8s_resources_advisor.cli.output import Table

        table = Table(title="Resources")
        table.add_column("PodName", no_wrap=True)
        table.add_column("MemoryRequest")
        table.add_row("api-7d9f8-abcde", "128Mi / 130Mi OK")
    """

    def add_column(
        self,
        header: ConsoleRenderable | RichCast | str = "",
        footer: ConsoleRenderable | RichCast | str = "",
        *,
        overflow: OverflowMethod = "fold",
        **kwargs: Any,
    ) -> None:
        """Add a column with overflow="fold" by default.

        Args:
            header: Column header text or renderable.
            footer: Column footer text or renderable.
            overflow: How to handle text overflow.
            **kwargs: Any other rich ``Table.add_column`` argument.
        """
        super().add_column(header, footer, overflow=overflow, **kwargs)
