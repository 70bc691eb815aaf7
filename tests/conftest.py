"""Shared test fixtures for graph-session."""

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
from typer.testing import CliRunner

from graph_session.cli.main import app
from graph_session.core.config import ReconnectPolicy, RetryPolicy
from graph_session.core.connection import Connection
from graph_session.core.models import HostAddress
from tests.fakes import FakeTransport

_GRAPH_ENV_VARS = (
    "GRAPH_HOSTS",
    "GRAPH_USER",
    "GRAPH_PASSWORD",
    "GRAPH_TRANSPORT",
    "GRAPH_PROFILE",
    "GRAPH_SESSION_SENTRY_DSN",
)


@pytest.fixture(autouse=True)
def clean_graph_env(monkeypatch):
    """Keep the developer's environment out of config resolution."""
    for name in _GRAPH_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_dir():
    """Temporary directory for test files."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def cli_runner(runner, temp_dir):
    """Invoke the CLI against the fake transport with an empty config file."""

    def invoke(*args: str, **kwargs):
        base = [
            "--config",
            str(temp_dir / "config.toml"),
            "--transport",
            "tests.fakes:factory",
        ]
        return runner.invoke(app, [*base, *args], **kwargs)

    return invoke


@pytest.fixture
def address():
    return HostAddress(host="graphd-1", port=9669)


@pytest.fixture
def transport(address):
    return FakeTransport(address)


@pytest.fixture
def connection(address, transport):
    transport.open()
    return Connection(address, transport)


@pytest.fixture
def fast_retry():
    return RetryPolicy(max_attempts=3, idle_time=0.0)


@pytest.fixture
def fast_reconnect():
    return ReconnectPolicy(max_attempts=3, max_duration=0.0, idle_time=0.0)
