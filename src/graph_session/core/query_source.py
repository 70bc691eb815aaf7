"""Statement source resolution for the CLI.

Inline text (-e) wins over a file path, which wins over piped stdin.
"""

from __future__ import annotations

import sys
from pathlib import Path

from graph_session.core.exceptions import InputError


def _read_statement_file(path: Path) -> str:
    if not path.is_file():
        msg = (
            f"Statement file not found: {path}\n"
            "Use -e for inline statements or pipe them via stdin."
        )
        raise InputError(msg)
    return path.read_text()


def resolve_query_source(inline: str | None, file_path: str | None) -> str:
    """Return the statement text, stripped of surrounding whitespace.

    Raises InputError when no source is available or the statement is empty.
    """
    if inline is not None:
        text = inline
    elif file_path is not None:
        text = _read_statement_file(Path(file_path))
    elif not sys.stdin.isatty():
        text = sys.stdin.read()
    else:
        msg = "No statement provided. Use -e, a file path, or pipe to stdin."
        raise InputError(msg)

    stmt = text.strip()
    if not stmt:
        msg = "Statement is empty"
        raise InputError(msg)
    return stmt
