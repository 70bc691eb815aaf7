"""Resilient client sessions for remote graph-query services."""

from graph_session.__about__ import __version__
from graph_session.core.config import ReconnectPolicy, RetryPolicy
from graph_session.core.connection import Connection, Transport
from graph_session.core.exceptions import (
    ConversionError,
    GraphSessionError,
    PingError,
    QueryError,
    ReconnectExhaustedError,
    ReleasedSessionError,
    SessionInvalidError,
    TransportError,
)
from graph_session.core.models import (
    AuthResult,
    ErrorCode,
    ExecutionResponse,
    HostAddress,
    TimezoneInfo,
)
from graph_session.core.pool import ConnectionPool, SessionPool
from graph_session.core.result import ResultSet
from graph_session.core.session import (
    ConnectionPoolOwned,
    Session,
    SessionPoolOwned,
    Standalone,
)
from graph_session.core.values import WireValue, convert, convert_params

__all__ = [
    "AuthResult",
    "Connection",
    "ConnectionPool",
    "ConnectionPoolOwned",
    "ConversionError",
    "ErrorCode",
    "ExecutionResponse",
    "GraphSessionError",
    "HostAddress",
    "PingError",
    "QueryError",
    "ReconnectExhaustedError",
    "ReconnectPolicy",
    "ReleasedSessionError",
    "ResultSet",
    "RetryPolicy",
    "Session",
    "SessionInvalidError",
    "SessionPool",
    "SessionPoolOwned",
    "Standalone",
    "TimezoneInfo",
    "Transport",
    "TransportError",
    "WireValue",
    "__version__",
    "convert",
    "convert_params",
]
