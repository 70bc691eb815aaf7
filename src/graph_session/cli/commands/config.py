"""Configuration management CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from graph_session.cli.commands._shared import get_resolved_config
from graph_session.core.config import DEFAULT_CONFIG_PATH, load_config

if TYPE_CHECKING:
    from pathlib import Path

config_app = typer.Typer(help="Configuration management commands")


@config_app.callback(invoke_without_command=True)
def config_callback(ctx: typer.Context) -> None:
    if not ctx.invoked_subcommand:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _mask_password(value: str | None) -> str:
    if value is None:
        return "not set"
    return "***"


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Display resolved configuration with source attribution."""
    resolved = get_resolved_config(ctx)
    config_path: Path | None = ctx.obj.get("config_file")
    sources = resolved.sources

    typer.echo("Connection Settings (resolved):")
    connection_fields = [
        ("hosts", ", ".join(str(h) for h in resolved.hosts)),
        ("user", resolved.user),
        ("password", _mask_password(resolved.password)),
        ("transport", resolved.transport or "not set"),
        ("timeout", f"{resolved.timeout}s"),
        ("max_connections", str(resolved.max_connections)),
    ]
    for field_name, value in connection_fields:
        source = sources.get(field_name, "default")
        typer.echo(f"  {field_name}: {value} ({source})")

    typer.echo("")
    typer.echo("Resilience:")
    retry, reconnect = resolved.retry, resolved.reconnect
    typer.echo(
        f"  retry: max_attempts={retry.max_attempts} idle_time={retry.idle_time}s"
        f" ({sources.get('retry', 'default')})"
    )
    typer.echo(
        f"  reconnect: max_attempts={reconnect.max_attempts}"
        f" max_duration={reconnect.max_duration}s idle_time={reconnect.idle_time}s"
        f" ({sources.get('reconnect', 'default')})"
    )

    typer.echo("")
    typer.echo("General:")
    format_source = sources.get("default_format", "default")
    typer.echo(f"  format: {resolved.default_format} ({format_source})")

    typer.echo("")
    typer.echo(f"Active Profile: {resolved.active_profile or 'none'}")

    display_path = config_path or DEFAULT_CONFIG_PATH
    typer.echo(f"Config File: {display_path}")


@config_app.command("profiles")
def config_profiles(ctx: typer.Context) -> None:
    """List available cluster profiles."""
    config_path: Path | None = ctx.obj.get("config_file")
    app_config = load_config(config_path)
    active_profile = ctx.obj.get("profile") or app_config.default_profile

    if not app_config.profiles:
        typer.echo("No profiles configured.")
        display_path = config_path or DEFAULT_CONFIG_PATH
        typer.echo(f"Add profiles to: {display_path}")
        return

    typer.echo("Available Profiles:")
    typer.echo("")
    for name, profile in sorted(app_config.profiles.items()):
        is_active = name == active_profile
        marker = "* " if is_active else "  "
        label = " (active)" if is_active else ""
        typer.echo(f"{marker}{name}{label}")

        typer.echo(f"      hosts: {', '.join(str(h) for h in profile.hosts)}")
        typer.echo(f"      user: {profile.user}")
        if profile.transport:
            typer.echo(f"      transport: {profile.transport}")
        typer.echo("")
