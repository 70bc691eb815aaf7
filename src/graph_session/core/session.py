"""Client session bound to one server-side session id.

A Session owns at most one connection. Every call runs through a bounded
retry loop; when the loop reports a dead connection or a rejected session,
the session repairs itself through whichever pool owns it and gives the
statement exactly one more try.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

import sentry_sdk
import structlog

from graph_session.core.config import ReconnectPolicy, RetryPolicy
from graph_session.core.exceptions import (
    PingError,
    QueryError,
    ReconnectExhaustedError,
    ReleasedSessionError,
    SessionInvalidError,
    TransportError,
)
from graph_session.core.json_result import parse_json_result
from graph_session.core.logging import session_context
from graph_session.core.models import SESSION_ERROR_CODES, TimezoneInfo
from graph_session.core.result import ResultSet
from graph_session.core.retry import reconnect_with_policy, run_with_retry
from graph_session.core.values import convert_params

if TYPE_CHECKING:
    from graph_session.core.connection import Connection
    from graph_session.core.models import ExecutionResponse
    from graph_session.core.values import WireValue

T = TypeVar("T")

PING_STATEMENT = 'RETURN "PING"'

_SINGLE_ATTEMPT = RetryPolicy(max_attempts=1)


class ConnectionProvider(Protocol):
    def acquire_idle_connection(self) -> Connection: ...

    def release(self, connection: Connection) -> None: ...


class SessionProvider(Protocol):
    def create_session(self) -> Session: ...


@dataclass(frozen=True)
class ConnectionPoolOwned:
    """Repaired by swapping in another pooled connection; id is kept."""

    pool: ConnectionProvider


@dataclass(frozen=True)
class SessionPoolOwned:
    """Repaired by adopting a brand-new session from the pool."""

    pool: SessionProvider


@dataclass(frozen=True)
class Standalone:
    """No pool to repair from; failures surface unchanged."""


Owner = ConnectionPoolOwned | SessionPoolOwned | Standalone


class Session:
    """Thread-safe handle on one remote session.

    All state changes (execute, reconnect, release) happen under one lock,
    so at most one remote call per session is in flight at a time.
    """

    def __init__(
        self,
        session_id: int,
        connection: Connection,
        owner: Owner | None = None,
        *,
        timezone: TimezoneInfo | None = None,
        retry_policy: RetryPolicy | None = None,
        reconnect_policy: ReconnectPolicy | None = None,
        returned_at: datetime | None = None,
    ) -> None:
        self._session_id = session_id
        self._connection: Connection | None = connection
        self.owner: Owner = owner if owner is not None else Standalone()
        self.timezone = timezone or TimezoneInfo()
        self.retry_policy = retry_policy or RetryPolicy()
        self.reconnect_policy = reconnect_policy or ReconnectPolicy()
        self.returned_at = returned_at or datetime.now(UTC)
        self._lock = threading.Lock()

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc: object) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "released" if self.is_released else str(self._connection.address)
        return f"<Session {self._session_id} {state}>"

    @property
    def session_id(self) -> int:
        return self._session_id

    @property
    def connection(self) -> Connection | None:
        return self._connection

    @property
    def is_released(self) -> bool:
        return self._connection is None

    # -- Execution --

    def execute(self, stmt: str) -> ResultSet:
        return self.execute_with_parameter(stmt, {})

    def execute_with_parameter(
        self, stmt: str, params: Mapping[str, Any] | None
    ) -> ResultSet:
        """Execute a statement and return its ResultSet.

        Statement-level failures come back as a ResultSet that is not
        succeeded; only connection/session failures that survive one
        reconnect cycle raise.
        """
        with self._lock:
            self._require_connection("execute")
            wire_params = convert_params(params)

            def call() -> ExecutionResponse:
                return self._live_connection().execute_with_parameter(
                    self._session_id, stmt, wire_params
                )

            response = self._execute_resilient(stmt, call)
            return ResultSet.from_response(response, self.timezone)

    def execute_json(self, stmt: str) -> bytes:
        return self.execute_json_with_parameter(stmt, {})

    def execute_json_with_parameter(
        self, stmt: str, params: Mapping[str, Any] | None
    ) -> bytes:
        """Execute a statement and return the server's JSON payload unchanged.

        Temporal values in the payload are UTC.
        """
        with self._lock:
            self._require_connection("execute")
            wire_params = convert_params(params)

            def call() -> bytes:
                payload = self._live_connection().execute_json_with_parameter(
                    self._session_id, stmt, wire_params
                )
                _raise_for_json_session_error(payload)
                return payload

            return self._execute_resilient(stmt, call)

    def _execute_resilient(self, stmt: str, call: Callable[[], T]) -> T:
        host = str(self._live_connection().address)
        with session_context(self._session_id, host):
            return self._execute_traced(stmt, call)

    def _execute_traced(self, stmt: str, call: Callable[[], T]) -> T:
        log = structlog.get_logger()
        stmt_normalized = " ".join(stmt.split())
        log.debug("executing query", stmt=stmt_normalized)

        with sentry_sdk.start_span(
            op="graph.query", description=stmt_normalized[:100]
        ) as span:
            start_time = time.monotonic()
            try:
                try:
                    result = run_with_retry(call, self.retry_policy)
                except (TransportError, SessionInvalidError) as e:
                    if isinstance(self.owner, Standalone):
                        raise
                    log.warning("connection lost, reconnecting", error=e.message)
                    reconnect_with_policy(self._reconnect, self.reconnect_policy)
                    span.set_data("reconnected", True)
                    result = run_with_retry(call, _SINGLE_ATTEMPT)
            except (TransportError, ReconnectExhaustedError):
                span.set_status("unavailable")
                raise
            except SessionInvalidError:
                span.set_status("unauthenticated")
                raise
            except QueryError:
                span.set_status("invalid_argument")
                raise

            duration_ms = (time.monotonic() - start_time) * 1000
            span.set_data("duration_ms", duration_ms)
            log.debug("query complete", duration_ms=f"{duration_ms:.1f}")
            return result

    # -- Reconnect --

    def _reconnect(self) -> None:
        """Repair the connection through the owning pool. Caller holds the lock."""
        log = structlog.get_logger().bind(session_id=self._session_id)
        owner = self.owner
        if isinstance(owner, ConnectionPoolOwned):
            new_connection = owner.pool.acquire_idle_connection()
            if self._connection is not None:
                owner.pool.release(self._connection)
            self._connection = new_connection
        elif isinstance(owner, SessionPoolOwned):
            donor = owner.pool.create_session()
            connection = donor._detach()
            self._discard_connection()
            self._session_id = donor.session_id
            self._connection = connection
            self.timezone = donor.timezone
            self.returned_at = donor.returned_at
        else:
            msg = "Standalone session has no pool to reconnect through"
            raise TransportError(msg)

        address = self._live_connection().address
        log.info(
            "reconnected",
            host=address.host,
            port=address.port,
            new_session_id=self._session_id,
        )

    def _detach(self) -> Connection:
        """Hand this session's connection over to another session."""
        with self._lock:
            connection = self._require_connection("detach")
            self._connection = None
            return connection

    def _discard_connection(self) -> None:
        """Sign out and close the current connection, best effort."""
        log = structlog.get_logger().bind(session_id=self._session_id)
        connection = self._connection
        if connection is None:
            return
        self._connection = None
        try:
            connection.sign_out(self._session_id)
        except Exception as e:
            log.warning("sign out failed", error=str(e))
        try:
            connection.close()
        except Exception as e:
            log.warning("close failed", error=str(e))

    # -- Lifecycle --

    def release(self) -> None:
        """Sign out and give the connection back. Safe to call repeatedly."""
        log = structlog.get_logger().bind(session_id=self._session_id)
        with self._lock:
            connection = self._connection
            if connection is None:
                log.warning("session already released")
                return
            if isinstance(self.owner, ConnectionPoolOwned):
                self._connection = None
                try:
                    connection.sign_out(self._session_id)
                except Exception as e:
                    log.warning("sign out failed", error=str(e))
                self.owner.pool.release(connection)
            else:
                self._discard_connection()
            log.debug("session released")

    def ping(self) -> None:
        """Check the session is usable; raises PingError when it is not."""
        if self._connection is None:
            msg = "failed to ping: session has been released"
            raise ReleasedSessionError(msg)
        try:
            result = self.execute(PING_STATEMENT)
        except ReleasedSessionError:
            raise
        except Exception as e:
            msg = f"session ping failed, {e}"
            raise PingError(msg) from e
        if not result.is_succeeded:
            msg = f"session ping failed, {result.error_msg}"
            raise PingError(msg)

    # -- Helpers --

    def _require_connection(self, operation: str) -> Connection:
        if self._connection is None:
            msg = f"failed to {operation}: session has been released"
            raise ReleasedSessionError(msg)
        return self._connection

    def _live_connection(self) -> Connection:
        return self._require_connection("execute")


def _raise_for_json_session_error(payload: bytes) -> None:
    try:
        parsed = parse_json_result(payload)
    except QueryError:
        return
    for err in parsed.errors:
        if err.code in SESSION_ERROR_CODES:
            msg = f"Session rejected by server: {err.message or err.code}"
            raise SessionInvalidError(msg, error_code=err.code)
