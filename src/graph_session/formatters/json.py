"""JSON formatter for ResultSet output: one object per row."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from graph_session.formatters.base import registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from graph_session.core.result import ResultSet


def _serialize_value(val: Any) -> Any:
    if isinstance(val, (int, float, str, bool, type(None))):
        return val
    if isinstance(val, list):
        return [_serialize_value(v) for v in val]
    if isinstance(val, dict):
        return {k: _serialize_value(v) for k, v in val.items()}
    if hasattr(val, "isoformat"):
        return val.isoformat()
    if hasattr(val, "model_dump"):
        return val.model_dump()
    return str(val)


class JSONFormatter:
    def __init__(self, compact: bool = False) -> None:
        self.compact = compact

    def format(self, result: ResultSet) -> Iterator[str]:
        rows = [
            {name: _serialize_value(val) for name, val in row.items()}
            for row in result.as_dicts()
        ]
        if self.compact:
            yield json.dumps(rows, default=str)
        else:
            yield json.dumps(rows, indent=2, default=str)


registry.register("json", JSONFormatter)
