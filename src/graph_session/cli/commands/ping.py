from __future__ import annotations

import time

import typer

from graph_session.cli.commands._shared import open_session


def ping_command(ctx: typer.Context) -> None:
    """Check that a session can be opened and answers a trivial statement."""
    with open_session(ctx) as session:
        start = time.monotonic()
        session.ping()
        elapsed_ms = (time.monotonic() - start) * 1000
        address = session.connection.address if session.connection else "?"
    typer.echo(f"ok: session {session.session_id} on {address} ({elapsed_ms:.1f} ms)")
