"""CSV formatter for ResultSet output (RFC 4180 compliant)."""

from __future__ import annotations

import csv
from io import StringIO
from typing import TYPE_CHECKING

from graph_session.formatters.base import cell_text, registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from graph_session.core.result import ResultSet


def _write_row(values: list[str]) -> str:
    buf = StringIO()
    csv.writer(buf).writerow(values)
    return buf.getvalue().rstrip("\r\n")


class CSVFormatter:
    def __init__(self, no_header: bool = False) -> None:
        self.no_header = no_header

    def format(self, result: ResultSet) -> Iterator[str]:
        if not self.no_header:
            yield _write_row(result.column_names)
        for row in result.row_values():
            yield _write_row([cell_text(v) for v in row])


registry.register("csv", CSVFormatter)
