"""Query result set returned by Session.execute().

Wraps an ExecutionResponse together with the session timezone so temporal
cells decode into the session's local time.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from graph_session.core.models import (
    ErrorCode,
    ExecutionResponse,
    PlanDescription,
    TimezoneInfo,
)
from graph_session.core.values import WireValue, to_python


class ResultSet(BaseModel):
    """Result of a single statement execution."""

    response: ExecutionResponse
    timezone: TimezoneInfo = TimezoneInfo()

    @classmethod
    def from_response(
        cls, response: ExecutionResponse, timezone: TimezoneInfo | None = None
    ) -> ResultSet:
        return cls(response=response, timezone=timezone or TimezoneInfo())

    @property
    def is_succeeded(self) -> bool:
        return self.response.error_code == ErrorCode.SUCCEEDED

    @property
    def error_code(self) -> int:
        return self.response.error_code

    @property
    def error_msg(self) -> str:
        return self.response.error_msg or ""

    @property
    def latency_in_us(self) -> int:
        return self.response.latency_in_us

    @property
    def space_name(self) -> str:
        return self.response.space_name or ""

    @property
    def comment(self) -> str:
        return self.response.comment or ""

    @property
    def plan_desc(self) -> PlanDescription | None:
        return self.response.plan_desc

    @property
    def column_names(self) -> list[str]:
        if self.response.data is None:
            return []
        return list(self.response.data.column_names)

    @property
    def rows(self) -> list[list[WireValue]]:
        """Raw wire rows."""
        if self.response.data is None:
            return []
        return self.response.data.rows

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return self.row_count == 0

    def row_values(self) -> list[tuple[Any, ...]]:
        """Rows decoded into Python values in the session timezone."""
        return [
            tuple(to_python(cell, self.timezone) for cell in row) for row in self.rows
        ]

    def column_values(self, name: str) -> list[Any]:
        try:
            index = self.column_names.index(name)
        except ValueError:
            msg = f"Unknown column {name!r}. Available: {', '.join(self.column_names)}"
            raise KeyError(msg) from None
        return [to_python(row[index], self.timezone) for row in self.rows]

    def as_dicts(self) -> list[dict[str, Any]]:
        names = self.column_names
        return [dict(zip(names, row, strict=True)) for row in self.row_values()]
