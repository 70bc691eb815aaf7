"""Rich table formatter for ResultSet output."""

from __future__ import annotations

import shutil
from io import StringIO
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from graph_session.formatters.base import cell_text, registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from graph_session.core.result import ResultSet

_NO_RESULTS = "No results"


def _truncate(value: str, width: int) -> str:
    if len(value) <= width:
        return value
    return value[: width - 1] + "…"


class TableFormatter:
    def __init__(self, width: int = 40) -> None:
        self.width = width

    def format(self, result: ResultSet) -> Iterator[str]:
        if result.is_empty:
            yield _NO_RESULTS
            return

        table = Table(show_edge=True, pad_edge=True)
        for name in result.column_names:
            table.add_column(name, no_wrap=True)

        for row in result.row_values():
            table.add_row(*(_truncate(cell_text(v), self.width) for v in row))

        buf = StringIO()
        term_width = shutil.get_terminal_size((120, 24)).columns
        console = Console(file=buf, force_terminal=True, width=term_width)
        console.print(table)
        yield buf.getvalue().rstrip("\n")
        if result.latency_in_us:
            yield f"Got {result.row_count} rows (time spent {result.latency_in_us} us)"


registry.register("table", TableFormatter)
