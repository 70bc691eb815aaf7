"""graph-session main entry point and command registration."""

from __future__ import annotations

import atexit
from pathlib import Path  # noqa: TC003
from typing import Annotated

import sentry_sdk
import typer

from graph_session.__about__ import __version__
from graph_session.cli.commands.config import config_app
from graph_session.cli.commands.ping import ping_command
from graph_session.cli.commands.query import query_command
from graph_session.cli.output import OutputFormat  # noqa: TC001
from graph_session.core.config import load_config
from graph_session.core.exceptions import ConfigError, GraphSessionError
from graph_session.core.logging import setup_logging
from graph_session.core.monitoring import setup_sentry

app = typer.Typer(
    help="graph-session - resilient sessions against a graph query service",
    no_args_is_help=True,
)

app.add_typer(config_app, name="config")
app.command("query")(query_command)
app.command("ping")(ping_command)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"graph-session {__version__}")
        raise typer.Exit()


def _configured_sentry_dsn(config_file: Path | None) -> str | None:
    # A broken config file is reported by the command that needs it.
    try:
        return load_config(config_file).sentry_dsn
    except ConfigError:
        return None


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable verbose logging"),
    ] = False,
    profile: Annotated[
        str | None,
        typer.Option("--profile", "-P", help="Named cluster profile"),
    ] = None,
    host: Annotated[
        str | None,
        typer.Option("--host", "-H", help="Graph service hosts, host:port[,...]"),
    ] = None,
    user: Annotated[
        str | None,
        typer.Option("--user", "-U", help="User name"),
    ] = None,
    password: Annotated[
        str | None,
        typer.Option("--password", "-W", help="Password"),
    ] = None,
    transport: Annotated[
        str | None,
        typer.Option("--transport", help="Transport factory as module:factory"),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", help="Connect timeout in seconds"),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config file"),
    ] = None,
    format: Annotated[
        OutputFormat | None,
        typer.Option("--format", "-f", help="Output format: table|json|csv"),
    ] = None,
    table: Annotated[
        bool,
        typer.Option("--table", help="Shorthand for --format table"),
    ] = False,
    compact: Annotated[
        bool,
        typer.Option("--compact", help="Compact JSON output (no indentation)"),
    ] = False,
    width: Annotated[
        int,
        typer.Option("--width", help="Column width for table format"),
    ] = 40,
    no_header: Annotated[
        bool,
        typer.Option("--no-header", help="Suppress header row in CSV output"),
    ] = False,
) -> None:
    """graph-session - resilient sessions against a graph query service."""
    setup_logging(verbose)
    setup_sentry(_configured_sentry_dsn(config_file))

    transaction = sentry_sdk.start_transaction(
        op="cli", name=ctx.invoked_subcommand or "graph-session"
    )
    transaction.__enter__()

    def cleanup() -> None:
        transaction.__exit__(None, None, None)
        sentry_sdk.flush(timeout=2)

    atexit.register(cleanup)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["profile"] = profile
    ctx.obj["host"] = host
    ctx.obj["user"] = user
    ctx.obj["password"] = password
    ctx.obj["transport"] = transport
    ctx.obj["timeout"] = timeout
    ctx.obj["config_file"] = config_file

    fmt = "table" if table else (format.value if format else None)
    ctx.obj["format"] = fmt
    ctx.obj["compact"] = compact
    ctx.obj["width"] = width
    ctx.obj["no_header"] = no_header


def run() -> None:
    """Entry point with global error handling."""
    try:
        app()
    except GraphSessionError as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e.message}", err=True)
        raise SystemExit(e.exit_code) from None
    except SystemExit:
        raise
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except Exception as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from None
