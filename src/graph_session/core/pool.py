"""Connection and session pools.

Both pools pick hosts round-robin and are safe to share between threads.
Sessions remember which pool created them, which decides how they repair
themselves after a connection failure:

- ConnectionPool sessions swap in another pooled connection and keep
  their session id.
- SessionPool sessions adopt a brand-new server session.
"""

from __future__ import annotations

import itertools
import threading
from collections import deque
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from graph_session.core.config import ReconnectPolicy, RetryPolicy
from graph_session.core.connection import Connection
from graph_session.core.exceptions import (
    ConfigError,
    PoolExhaustedError,
    ReconnectExhaustedError,
    SessionInvalidError,
    TransportError,
)
from graph_session.core.session import ConnectionPoolOwned, Session, SessionPoolOwned

if TYPE_CHECKING:
    from graph_session.core.connection import TransportFactory
    from graph_session.core.models import HostAddress
    from graph_session.core.result import ResultSet


class _HostRing:
    """Round-robin over host addresses with failover on connect."""

    def __init__(self, addresses: Sequence[HostAddress]) -> None:
        if not addresses:
            msg = "At least one host address is required"
            raise ConfigError(msg)
        self.addresses = list(addresses)
        self._cycle = itertools.cycle(self.addresses)
        self._lock = threading.Lock()

    def _next(self) -> HostAddress:
        with self._lock:
            return next(self._cycle)

    def open(self, factory: TransportFactory, timeout: float) -> Connection:
        log = structlog.get_logger()
        last_error: TransportError | None = None
        for _ in range(len(self.addresses)):
            address = self._next()
            try:
                return Connection.open(address, factory, timeout)
            except TransportError as e:
                log.warning("host unreachable", address=str(address), error=e.message)
                last_error = e
        hosts = ", ".join(str(a) for a in self.addresses)
        msg = f"No reachable host among: {hosts}"
        raise TransportError(msg) from last_error


def _close_quietly(connection: Connection) -> None:
    try:
        connection.close()
    except Exception as e:
        structlog.get_logger().warning(
            "close failed", address=str(connection.address), error=str(e)
        )


class ConnectionPool:
    """Pool of open connections handed out to sessions."""

    def __init__(
        self,
        addresses: Sequence[HostAddress],
        transport_factory: TransportFactory,
        *,
        timeout: float = 10.0,
        max_connections: int = 10,
        retry_policy: RetryPolicy | None = None,
        reconnect_policy: ReconnectPolicy | None = None,
    ) -> None:
        self._hosts = _HostRing(addresses)
        self._factory = transport_factory
        self.timeout = timeout
        self.max_connections = max_connections
        self.retry_policy = retry_policy or RetryPolicy()
        self.reconnect_policy = reconnect_policy or ReconnectPolicy()
        self._idle: deque[Connection] = deque()
        self._active: set[Connection] = set()
        self._opening = 0
        self._closed = False
        self._lock = threading.Lock()

    def __enter__(self) -> ConnectionPool:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def idle_count(self) -> int:
        return len(self._idle)

    @property
    def active_count(self) -> int:
        return len(self._active)

    def acquire_idle_connection(self) -> Connection:
        """Check out an idle connection, opening a new one if there is room."""
        stale: list[Connection] = []
        with self._lock:
            if self._closed:
                msg = "Connection pool is closed"
                raise PoolExhaustedError(msg)
            connection = None
            while self._idle:
                candidate = self._idle.popleft()
                if candidate.is_healthy:
                    connection = candidate
                    break
                stale.append(candidate)
            if connection is not None:
                self._active.add(connection)
            elif len(self._active) + self._opening >= self.max_connections:
                msg = f"No idle connection: all {self.max_connections} in use"
                raise PoolExhaustedError(msg)
            else:
                self._opening += 1

        for candidate in stale:
            _close_quietly(candidate)
        if connection is not None:
            return connection

        try:
            connection = self._hosts.open(self._factory, self.timeout)
        finally:
            with self._lock:
                self._opening -= 1
        with self._lock:
            self._active.add(connection)
        return connection

    def release(self, connection: Connection) -> None:
        """Return a connection; unhealthy ones are closed instead of reused."""
        with self._lock:
            self._active.discard(connection)
            keep = not self._closed and connection.is_healthy
            if keep:
                self._idle.append(connection)
        if not keep:
            _close_quietly(connection)

    def get_session(self, username: str, password: str | None = None) -> Session:
        """Authenticate on a pooled connection and return a new Session."""
        connection = self.acquire_idle_connection()
        try:
            auth = connection.authenticate(username, password)
        except Exception:
            self.release(connection)
            raise
        structlog.get_logger().debug(
            "session created",
            session_id=auth.session_id,
            address=str(connection.address),
        )
        return Session(
            auth.session_id,
            connection,
            ConnectionPoolOwned(self),
            timezone=auth.timezone,
            retry_policy=self.retry_policy,
            reconnect_policy=self.reconnect_policy,
        )

    def close(self) -> None:
        with self._lock:
            self._closed = True
            connections = [*self._idle, *self._active]
            self._idle.clear()
            self._active.clear()
        for connection in connections:
            _close_quietly(connection)


class SessionPool:
    """Pool of authenticated sessions for a single user."""

    def __init__(
        self,
        addresses: Sequence[HostAddress],
        transport_factory: TransportFactory,
        username: str,
        password: str | None = None,
        *,
        timeout: float = 10.0,
        max_size: int = 10,
        retry_policy: RetryPolicy | None = None,
        reconnect_policy: ReconnectPolicy | None = None,
    ) -> None:
        self._hosts = _HostRing(addresses)
        self._factory = transport_factory
        self.username = username
        self.password = password
        self.timeout = timeout
        self.max_size = max_size
        self.retry_policy = retry_policy or RetryPolicy()
        self.reconnect_policy = reconnect_policy or ReconnectPolicy()
        self._idle: deque[Session] = deque()
        self._active: set[Session] = set()
        self._creating = 0
        self._closed = False
        self._lock = threading.Lock()

    def __enter__(self) -> SessionPool:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def idle_count(self) -> int:
        return len(self._idle)

    @property
    def active_count(self) -> int:
        return len(self._active)

    def create_session(self) -> Session:
        """Open a fresh connection and authenticate a new server session."""
        connection = self._hosts.open(self._factory, self.timeout)
        try:
            auth = connection.authenticate(self.username, self.password)
        except Exception:
            _close_quietly(connection)
            raise
        return Session(
            auth.session_id,
            connection,
            SessionPoolOwned(self),
            timezone=auth.timezone,
            retry_policy=self.retry_policy,
            reconnect_policy=self.reconnect_policy,
        )

    def get_session(self) -> Session:
        with self._lock:
            if self._closed:
                msg = "Session pool is closed"
                raise PoolExhaustedError(msg)
            while self._idle:
                session = self._idle.popleft()
                if not session.is_released:
                    self._active.add(session)
                    return session
            if len(self._active) + self._creating >= self.max_size:
                msg = f"No idle session: all {self.max_size} in use"
                raise PoolExhaustedError(msg)
            self._creating += 1

        try:
            session = self.create_session()
        finally:
            with self._lock:
                self._creating -= 1
        with self._lock:
            self._active.add(session)
        return session

    def return_session(self, session: Session) -> None:
        with self._lock:
            self._active.discard(session)
            keep = not self._closed and not session.is_released
            if keep:
                session.returned_at = datetime.now(UTC)
                self._idle.append(session)
        if not keep and not session.is_released:
            session.release()

    def execute(
        self, stmt: str, params: Mapping[str, Any] | None = None
    ) -> ResultSet:
        """Run one statement on a pooled session."""
        session = self.get_session()
        try:
            return session.execute_with_parameter(stmt, params)
        except (TransportError, SessionInvalidError, ReconnectExhaustedError):
            session.release()
            raise
        finally:
            self.return_session(session)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            sessions = [*self._idle, *self._active]
            self._idle.clear()
            self._active.clear()
        for session in sessions:
            session.release()
