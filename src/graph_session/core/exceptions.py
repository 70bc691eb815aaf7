"""Exception hierarchy for graph-session.

All exceptions carry an exit_code for CLI return value mapping.
Exit codes are defined in exit_codes.py.
"""

from __future__ import annotations

from graph_session.core.exit_codes import ExitCode


class GraphSessionError(Exception):
    """Base exception for all graph-session errors."""

    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class TransportError(GraphSessionError):
    """Connection severed or unusable; never retried, always reconnected."""

    exit_code: int = ExitCode.NETWORK_ERROR


class SessionInvalidError(GraphSessionError):
    """The server no longer recognizes the session (invalid or timed out)."""

    exit_code: int = ExitCode.NETWORK_ERROR

    def __init__(self, message: str, error_code: int | None = None) -> None:
        self.error_code = error_code
        super().__init__(message)


class QueryError(GraphSessionError):
    """Statement-level failure reported by the server."""

    exit_code: int = ExitCode.QUERY_ERROR

    def __init__(self, message: str, error_code: int | None = None) -> None:
        self.error_code = error_code
        super().__init__(message)


class InputError(GraphSessionError):
    """File not found, invalid parameters."""

    exit_code: int = ExitCode.INPUT_ERROR


class ConversionError(InputError):
    """A parameter value has no wire representation."""


class ReleasedSessionError(GraphSessionError):
    """Operation attempted on a session that no longer holds a connection."""


class ReconnectExhaustedError(GraphSessionError):
    """Reconnect attempts or time budget exhausted; the service is unavailable."""

    exit_code: int = ExitCode.SERVICE_UNAVAILABLE


class PingError(GraphSessionError):
    """Session liveness check failed."""

    exit_code: int = ExitCode.NETWORK_ERROR


class AuthenticationError(GraphSessionError):
    """Server rejected the supplied credentials."""

    exit_code: int = ExitCode.NETWORK_ERROR


class PoolExhaustedError(GraphSessionError):
    """No idle connection and the pool is at capacity."""

    exit_code: int = ExitCode.SERVICE_UNAVAILABLE


class ConfigError(GraphSessionError):
    """Malformed config, missing profile."""

    exit_code: int = ExitCode.CONFIG_ERROR
