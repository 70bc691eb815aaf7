"""Connections to a single graph service host.

The RPC client itself is pluggable: anything implementing the Transport
protocol can be used, typically a thin adapter over the service's generated
RPC bindings. A Connection pairs one transport with the address it talks to
and is what sessions and pools hand around.
"""

from __future__ import annotations

import importlib
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

import structlog

from graph_session.core.exceptions import ConfigError, TransportError

if TYPE_CHECKING:
    from graph_session.core.models import AuthResult, ExecutionResponse, HostAddress
    from graph_session.core.values import WireValue


@runtime_checkable
class Transport(Protocol):
    """RPC capability against one host.

    Implementations raise TransportError, or any builtin OSError such as
    ConnectionError or TimeoutError, when the underlying connection is
    unusable. AuthenticationError means the server rejected the credentials.
    """

    def open(self) -> None: ...

    def authenticate(self, username: str, password: str | None) -> AuthResult: ...

    def execute_with_parameter(
        self, session_id: int, stmt: str, params: Mapping[str, WireValue]
    ) -> ExecutionResponse: ...

    def execute_json_with_parameter(
        self, session_id: int, stmt: str, params: Mapping[str, WireValue]
    ) -> bytes: ...

    def sign_out(self, session_id: int) -> None: ...

    def close(self) -> None: ...


T = TypeVar("T")

TransportFactory = Callable[["HostAddress", float], Transport]


def load_transport_factory(path: str) -> TransportFactory:
    """Import a transport factory given as ``module:attribute``."""
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        msg = f"Invalid transport path: '{path}'. Expected 'module:factory'"
        raise ConfigError(msg)
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        msg = f"Cannot import transport module '{module_name}': {e}"
        raise ConfigError(msg) from e
    factory = getattr(module, attr, None)
    if not callable(factory):
        msg = f"Transport factory '{attr}' not found in module '{module_name}'"
        raise ConfigError(msg)
    return factory


class Connection:
    """An opened transport bound to one host address."""

    def __init__(self, address: HostAddress, transport: Transport) -> None:
        self.address = address
        self._transport = transport
        self._closed = False
        self._broken = False

    @classmethod
    def open(
        cls, address: HostAddress, factory: TransportFactory, timeout: float
    ) -> Connection:
        transport = factory(address, timeout)
        try:
            transport.open()
        except OSError as e:
            msg = f"Connection failed to {address}: {e}"
            raise TransportError(msg) from e
        structlog.get_logger().debug("connection opened", address=str(address))
        return cls(address, transport)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def is_healthy(self) -> bool:
        """False once closed or after the transport reported a connection failure."""
        return not (self._closed or self._broken)

    def _guarded(self, func: Callable[[], T]) -> T:
        try:
            return func()
        except (TransportError, OSError):
            self._broken = True
            raise

    def authenticate(self, username: str, password: str | None) -> AuthResult:
        return self._guarded(lambda: self._transport.authenticate(username, password))

    def execute_with_parameter(
        self, session_id: int, stmt: str, params: Mapping[str, WireValue]
    ) -> ExecutionResponse:
        return self._guarded(
            lambda: self._transport.execute_with_parameter(session_id, stmt, params)
        )

    def execute_json_with_parameter(
        self, session_id: int, stmt: str, params: Mapping[str, WireValue]
    ) -> bytes:
        return self._guarded(
            lambda: self._transport.execute_json_with_parameter(
                session_id, stmt, params
            )
        )

    def sign_out(self, session_id: int) -> None:
        self._guarded(lambda: self._transport.sign_out(session_id))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._transport.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Connection {self.address} {state}>"
