"""structlog setup and per-session log context.

Everything is written to stderr; stdout carries query results only.
While a session runs a statement, its id and host are bound as context
variables, so retry and reconnect messages logged deep in the loops
name the session they belong to.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # Looked up per logger: CliRunner swaps sys.stderr between invocations.
    return structlog.PrintLogger(file=sys.stderr)


def setup_logging(verbose: bool = False) -> None:
    """Route graph-session logs to stderr.

    WARNING and up by default, which surfaces retries and reconnects;
    ``verbose`` adds per-statement DEBUG lines.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


@contextmanager
def session_context(session_id: int, host: str | None = None) -> Iterator[None]:
    """Bind ``session_id`` (and ``host``) to every log line in the block."""
    fields: dict[str, Any] = {"session_id": session_id}
    if host is not None:
        fields["host"] = host
    with structlog.contextvars.bound_contextvars(**fields):
        yield
