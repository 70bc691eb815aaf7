"""Tests for exit code mapping through run()."""

from unittest.mock import patch

import pytest

from graph_session.cli.main import run
from graph_session.core.exceptions import (
    ConfigError,
    InputError,
    PingError,
    ReconnectExhaustedError,
    TransportError,
)
from graph_session.core.exit_codes import ExitCode


@pytest.mark.unit
@pytest.mark.parametrize(
    ("error", "exit_code"),
    [
        (TransportError("connection reset"), ExitCode.NETWORK_ERROR),
        (PingError("session ping failed"), ExitCode.NETWORK_ERROR),
        (InputError("bad input"), ExitCode.INPUT_ERROR),
        (ConfigError("bad config"), ExitCode.CONFIG_ERROR),
        (ReconnectExhaustedError("unavailable"), ExitCode.SERVICE_UNAVAILABLE),
    ],
)
def test_run_maps_library_errors(error, exit_code, capsys):
    with (
        patch("graph_session.cli.main.app", side_effect=error),
        pytest.raises(SystemExit) as exc_info,
    ):
        run()
    assert exc_info.value.code == exit_code
    assert f"Error: {error.message}" in capsys.readouterr().err


@pytest.mark.unit
def test_run_captures_to_sentry():
    error = TransportError("gone")
    with (
        patch("graph_session.cli.main.app", side_effect=error),
        patch("graph_session.cli.main.sentry_sdk.capture_exception") as capture,
        pytest.raises(SystemExit),
    ):
        run()
    capture.assert_called_once_with(error)


@pytest.mark.unit
def test_run_keyboard_interrupt_maps_to_130():
    with (
        patch("graph_session.cli.main.app", side_effect=KeyboardInterrupt),
        pytest.raises(SystemExit) as exc_info,
    ):
        run()
    assert exc_info.value.code == 130


@pytest.mark.unit
def test_run_unexpected_exception_maps_to_1():
    with (
        patch("graph_session.cli.main.app", side_effect=RuntimeError("boom")),
        pytest.raises(SystemExit) as exc_info,
    ):
        run()
    assert exc_info.value.code == 1


@pytest.mark.unit
def test_run_system_exit_passes_through():
    with (
        patch("graph_session.cli.main.app", side_effect=SystemExit(42)),
        pytest.raises(SystemExit) as exc_info,
    ):
        run()
    assert exc_info.value.code == 42
