"""Outcome classification for remote calls.

Retry and reconnect logic both consult classify() so there is exactly one
place deciding whether a failure means the connection is gone, the server
dropped the session, or the statement itself failed.
"""

from __future__ import annotations

from enum import StrEnum

from graph_session.core.exceptions import (
    GraphSessionError,
    SessionInvalidError,
    TransportError,
)
from graph_session.core.models import ExecutionResponse


class Outcome(StrEnum):
    SUCCESS = "success"
    TRANSPORT_FAILURE = "transport_failure"
    SESSION_INVALID = "session_invalid"
    QUERY_ERROR = "query_error"
    # Anything the transport raises outside our taxonomy, e.g. a protocol
    # or serialization fault of the RPC library.
    RETRYABLE = "retryable"


def is_transport_error(error: BaseException | None) -> bool:
    """Connection severed or socket I/O failed (timeouts included)."""
    return isinstance(error, (TransportError, OSError))


def is_session_error(
    error: BaseException | None, response: object | None = None
) -> bool:
    if isinstance(error, SessionInvalidError):
        return True
    return isinstance(response, ExecutionResponse) and response.is_session_error


def classify(error: BaseException | None, response: object | None = None) -> Outcome:
    """Classify the (error, response) pair of one remote call.

    ``response`` is only inspected when it is an ExecutionResponse; other
    payloads (e.g. JSON bytes) count as success when no error was raised.
    """
    if is_transport_error(error):
        return Outcome.TRANSPORT_FAILURE
    if is_session_error(error, response):
        return Outcome.SESSION_INVALID
    if error is not None:
        if isinstance(error, GraphSessionError):
            return Outcome.QUERY_ERROR
        return Outcome.RETRYABLE
    if isinstance(response, ExecutionResponse) and not response.is_succeeded:
        return Outcome.QUERY_ERROR
    return Outcome.SUCCESS
