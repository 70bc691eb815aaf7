"""Configuration management for graph-session.

Handles TOML config files, environment variables, named profiles,
retry/reconnect policies and configuration precedence resolution.

Precedence order (highest to lowest):
1. CLI flags (--host, --user, etc.)
2. Environment variables (GRAPH_HOSTS, GRAPH_USER, GRAPH_PASSWORD, GRAPH_TRANSPORT)
3. Named profile (--profile or GRAPH_PROFILE env var)
4. Config file defaults
5. Built-in defaults
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from graph_session.core.exceptions import ConfigError
from graph_session.core.models import HostAddress

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "graph-session" / "config.toml"

_ENV_VARS: dict[str, str] = {
    "GRAPH_HOSTS": "hosts",
    "GRAPH_USER": "user",
    "GRAPH_PASSWORD": "password",  # pragma: allowlist secret
    "GRAPH_TRANSPORT": "transport",
}

_PROFILE_DEFAULTS: dict[str, Any] = {
    "hosts": ["127.0.0.1:9669"],
    "user": "root",
    "password": None,
    "timeout": 10.0,
    "max_connections": 10,
    "transport": None,
    "retry": None,
    "reconnect": None,
}


def parse_hosts(value: Any) -> list[HostAddress]:
    """Accept "h1:p1,h2:p2", a list of such strings, or HostAddress objects."""
    if isinstance(value, str):
        value = [part for part in value.split(",") if part.strip()]
    hosts: list[HostAddress] = []
    for item in value:
        if isinstance(item, HostAddress):
            hosts.append(item)
        elif isinstance(item, dict):
            hosts.append(HostAddress(**item))
        else:
            try:
                hosts.append(HostAddress.parse(str(item)))
            except ValidationError as e:
                msg = f"Invalid host address: '{item}': {e}"
                raise ValueError(msg) from e
    if not hosts:
        msg = "At least one host address is required"
        raise ValueError(msg)
    return hosts


class RetryPolicy(BaseModel):
    """Bounded retry of a single remote call on the same connection."""

    max_attempts: int = 3
    idle_time: float = 0.0

    @field_validator("max_attempts")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:
        if v < 1:
            msg = f"max_attempts must be >= 1, got {v}"
            raise ValueError(msg)
        return v

    @field_validator("idle_time")
    @classmethod
    def validate_idle_time(cls, v: float) -> float:
        if v < 0:
            msg = f"idle_time must be >= 0, got {v}"
            raise ValueError(msg)
        return v


class ReconnectPolicy(BaseModel):
    """Bounds on repairing a broken session. Zero disables a bound."""

    max_attempts: int = 3
    max_duration: float = 0.0
    idle_time: float = 1.0

    @field_validator("max_attempts", "max_duration", "idle_time")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            msg = f"reconnect bounds must be >= 0, got {v}"
            raise ValueError(msg)
        return v


class ClusterProfile(BaseModel):
    hosts: list[HostAddress] = [HostAddress(host="127.0.0.1")]
    user: str = "root"
    password: str | None = None
    timeout: float = 10.0
    max_connections: int = 10
    transport: str | None = None
    retry: RetryPolicy = RetryPolicy()
    reconnect: ReconnectPolicy = ReconnectPolicy()

    @field_validator("hosts", mode="before")
    @classmethod
    def validate_hosts(cls, v: Any) -> list[HostAddress]:
        return parse_hosts(v)

    @field_validator("max_connections")
    @classmethod
    def validate_max_connections(cls, v: int) -> int:
        if v < 1:
            msg = f"max_connections must be >= 1, got {v}"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def check_timeout(self) -> ClusterProfile:
        if self.timeout <= 0:
            msg = f"timeout must be positive, got {self.timeout}"
            raise ValueError(msg)
        return self


class AppConfig(BaseModel):
    default_format: str = "table"
    default_profile: str | None = None
    sentry_dsn: str | None = None
    profiles: dict[str, ClusterProfile] = {}


class ResolvedConfig(ClusterProfile):
    default_format: str = "table"
    active_profile: str | None = None
    sources: dict[str, str] = {}


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file.

    Returns default AppConfig if file doesn't exist.
    Raises ConfigError on malformed TOML or invalid config.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return AppConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Malformed TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid configuration in {config_path}: {e}"
        raise ConfigError(msg) from e


def resolve_config(
    config: AppConfig,
    profile_name: str | None = None,
    **cli_overrides: Any,
) -> ResolvedConfig:
    """Resolve configuration using precedence chain.

    CLI > env > profile > config defaults > built-in defaults.
    """
    sources: dict[str, str] = {}
    resolved: dict[str, Any] = {}

    # Layer 1: Built-in defaults
    resolved.update(_PROFILE_DEFAULTS)
    resolved["default_format"] = "table"
    for key in resolved:
        sources[key] = "default"

    # Layer 2: Config file global defaults
    if config.default_format != "table":
        resolved["default_format"] = config.default_format
        sources["default_format"] = "config"

    # Layer 3: Named profile
    effective_profile = profile_name
    if not effective_profile:
        effective_profile = os.environ.get("GRAPH_PROFILE")
    if not effective_profile:
        effective_profile = config.default_profile

    if effective_profile:
        if effective_profile not in config.profiles:
            available = (
                ", ".join(sorted(config.profiles.keys())) if config.profiles else "none"
            )
            msg = (
                f"Unknown profile: '{effective_profile}'. "
                f"Available profiles: {available}"
            )
            raise ConfigError(msg)
        profile = config.profiles[effective_profile]
        for key in profile.model_fields_set:
            if key in resolved:
                resolved[key] = getattr(profile, key)
                sources[key] = f"profile: {effective_profile}"

    # Layer 4: Environment variables
    for env_var, field_name in _ENV_VARS.items():
        value = os.environ.get(env_var)
        if value is not None:
            resolved[field_name] = value
            sources[field_name] = f"env: {env_var}"

    # Layer 5: CLI flags (highest priority)
    cli_to_field = {
        "host": "hosts",
        "user": "user",
        "password": "password",  # pragma: allowlist secret
        "transport": "transport",
        "timeout": "timeout",
    }
    for cli_name, field_name in cli_to_field.items():
        value = cli_overrides.get(cli_name)
        if value is not None:
            resolved[field_name] = value
            sources[field_name] = f"cli: --{cli_name}"

    for key in ("retry", "reconnect"):
        if resolved[key] is None:
            del resolved[key]

    resolved["active_profile"] = effective_profile
    resolved["sources"] = sources
    try:
        return ResolvedConfig(**resolved)
    except ValidationError as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigError(msg) from e
