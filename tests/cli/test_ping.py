"""Tests for the ping command."""

import pytest

from graph_session.core.exceptions import TransportError


@pytest.mark.unit
def test_ping_ok(cli_runner):
    result = cli_runner("--host", "graphd-1:9669", "ping")
    assert result.exit_code == 0, result.output
    assert result.stdout.startswith("ok: session ")
    assert "graphd-1:9669" in result.stdout


@pytest.mark.unit
def test_ping_unreachable(cli_runner):
    result = cli_runner("--transport", "tests.fakes:unreachable_factory", "ping")
    assert isinstance(result.exception, TransportError)
