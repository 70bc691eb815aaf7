from __future__ import annotations

import sys
from typing import Annotated

import typer

from graph_session.cli.commands._shared import open_session, output_result, parse_params
from graph_session.core.exceptions import InputError
from graph_session.core.exit_codes import ExitCode
from graph_session.core.json_result import parse_json_result
from graph_session.core.query_source import resolve_query_source


def query_command(
    ctx: typer.Context,
    file: Annotated[
        str | None,
        typer.Argument(help="Statement file to execute"),
    ] = None,
    execute: Annotated[
        str | None,
        typer.Option("--execute", "-e", help="Execute an inline statement"),
    ] = None,
    param: Annotated[
        list[str] | None,
        typer.Option("--param", help="Statement parameter name=value (JSON values)"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print the server's raw JSON result"),
    ] = False,
) -> None:
    """Execute a graph statement from file, inline (-e), or stdin."""
    try:
        is_tty = sys.stdin.isatty()
    except (ValueError, AttributeError):
        is_tty = False
    if execute is None and file is None and is_tty:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    try:
        stmt = resolve_query_source(inline=execute, file_path=file)
        params = parse_params(param)
    except InputError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(ExitCode.INPUT_ERROR) from exc

    if json_output:
        with open_session(ctx) as session:
            payload = session.execute_json_with_parameter(stmt, params)
        sys.stdout.write(payload.decode("utf-8", errors="replace") + "\n")
        parsed = parse_json_result(payload)
        if parsed.error_code:
            typer.echo(f"Error ({parsed.error_code}): {parsed.error_msg}", err=True)
            raise typer.Exit(ExitCode.QUERY_ERROR)
        return

    with open_session(ctx) as session:
        result = session.execute_with_parameter(stmt, params)

    if not result.is_succeeded:
        typer.echo(f"Error ({result.error_code}): {result.error_msg}", err=True)
        raise typer.Exit(ExitCode.QUERY_ERROR)
    output_result(ctx, result)
