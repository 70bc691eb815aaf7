"""Shared CLI plumbing for command modules.

Config resolution, session creation, and output helpers.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from graph_session.cli.output import get_formatter, write_output
from graph_session.core.config import ResolvedConfig, load_config, resolve_config
from graph_session.core.connection import load_transport_factory
from graph_session.core.exceptions import ConfigError, InputError
from graph_session.core.pool import ConnectionPool

if TYPE_CHECKING:
    import typer

    from graph_session.core.result import ResultSet
    from graph_session.core.session import Session


def get_resolved_config(ctx: typer.Context) -> ResolvedConfig:
    obj = ctx.ensure_object(dict)
    config = load_config(obj.get("config_file"))

    cli_overrides: dict[str, Any] = {}
    for key in ("host", "user", "password", "transport", "timeout"):
        val = obj.get(key)
        if val:
            cli_overrides[key] = val

    return resolve_config(config, profile_name=obj.get("profile"), **cli_overrides)


@contextmanager
def open_session(ctx: typer.Context) -> Iterator[Session]:
    """Yield a session from a short-lived connection pool."""
    resolved = get_resolved_config(ctx)
    if not resolved.transport:
        msg = (
            "No transport configured. Use --transport module:factory, "
            "set GRAPH_TRANSPORT, or add 'transport' to the profile."
        )
        raise ConfigError(msg)
    factory = load_transport_factory(resolved.transport)

    with (
        ConnectionPool(
            resolved.hosts,
            factory,
            timeout=resolved.timeout,
            max_connections=resolved.max_connections,
            retry_policy=resolved.retry,
            reconnect_policy=resolved.reconnect,
        ) as pool,
        pool.get_session(resolved.user, resolved.password) as session,
    ):
        yield session


def parse_params(raw: list[str] | None) -> dict[str, Any]:
    """Parse repeated ``name=value`` options; values are JSON when they parse."""
    params: dict[str, Any] = {}
    for item in raw or []:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            msg = f"Invalid parameter '{item}'. Expected name=value"
            raise InputError(msg)
        try:
            params[name.strip()] = json.loads(value)
        except json.JSONDecodeError:
            params[name.strip()] = value
    return params


def format_options(ctx: typer.Context) -> dict[str, Any]:
    obj = ctx.ensure_object(dict)
    return {
        "format_flag": obj.get("format"),
        "compact": obj.get("compact", False),
        "width": obj.get("width", 40),
        "no_header": obj.get("no_header", False),
    }


def output_result(ctx: typer.Context, result: ResultSet) -> None:
    formatter = get_formatter(**format_options(ctx))
    write_output(formatter, result)
