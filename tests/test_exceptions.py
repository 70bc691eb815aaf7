"""Tests for the exception hierarchy and exit codes."""

import pytest

from graph_session.core.exceptions import (
    AuthenticationError,
    ConfigError,
    ConversionError,
    GraphSessionError,
    InputError,
    PingError,
    PoolExhaustedError,
    QueryError,
    ReconnectExhaustedError,
    ReleasedSessionError,
    SessionInvalidError,
    TransportError,
)
from graph_session.core.exit_codes import ExitCode


@pytest.mark.unit
class TestExitCodes:
    def test_exit_code_values(self):
        assert ExitCode.SUCCESS == 0
        assert ExitCode.GENERAL_ERROR == 1
        assert ExitCode.USAGE_ERROR == 2
        assert ExitCode.INPUT_ERROR == 3
        assert ExitCode.QUERY_ERROR == 4
        assert ExitCode.NETWORK_ERROR == 5
        assert ExitCode.SERVICE_UNAVAILABLE == 6
        assert ExitCode.CONFIG_ERROR == 7


@pytest.mark.unit
class TestGraphSessionError:
    def test_base_exception(self):
        err = GraphSessionError("test error")
        assert str(err) == "test error"
        assert err.message == "test error"
        assert err.exit_code == ExitCode.GENERAL_ERROR

    @pytest.mark.parametrize(
        ("cls", "exit_code"),
        [
            (TransportError, ExitCode.NETWORK_ERROR),
            (SessionInvalidError, ExitCode.NETWORK_ERROR),
            (QueryError, ExitCode.QUERY_ERROR),
            (InputError, ExitCode.INPUT_ERROR),
            (ConversionError, ExitCode.INPUT_ERROR),
            (ReleasedSessionError, ExitCode.GENERAL_ERROR),
            (ReconnectExhaustedError, ExitCode.SERVICE_UNAVAILABLE),
            (PingError, ExitCode.NETWORK_ERROR),
            (AuthenticationError, ExitCode.NETWORK_ERROR),
            (PoolExhaustedError, ExitCode.SERVICE_UNAVAILABLE),
            (ConfigError, ExitCode.CONFIG_ERROR),
        ],
    )
    def test_exit_codes(self, cls, exit_code):
        err = cls("boom")
        assert isinstance(err, GraphSessionError)
        assert err.exit_code == exit_code

    def test_server_error_code_kept(self):
        assert QueryError("bad", error_code=-1004).error_code == -1004
        assert SessionInvalidError("gone", error_code=-1002).error_code == -1002
        assert SessionInvalidError("gone").error_code is None
