"""Tests for logging setup and session log context."""

import pytest
import structlog

from graph_session.core.connection import Connection
from graph_session.core.logging import session_context, setup_logging
from graph_session.core.session import Session
from tests.fakes import FakeTransport


@pytest.mark.unit
class TestSetupLogging:
    def test_setup_without_errors(self):
        setup_logging()

    def test_setup_verbose(self):
        setup_logging(verbose=True)


@pytest.mark.unit
class TestLogOutput:
    def test_log_to_stderr(self, capsys):
        """Log output goes to stderr, not stdout."""
        setup_logging(verbose=True)
        structlog.get_logger().info("test message")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "test message" in captured.err

    def test_debug_hidden_by_default(self, capsys):
        setup_logging(verbose=False)
        log = structlog.get_logger()
        log.debug("hidden debug")
        log.info("hidden info")
        log.warning("shown warning")

        captured = capsys.readouterr()
        assert "hidden" not in captured.err
        assert "shown warning" in captured.err

    def test_session_context_rendered(self, capsys):
        setup_logging()
        with session_context(42, "graphd-1:9669"):
            structlog.get_logger().warning("start retry")

        err = capsys.readouterr().err
        assert "session_id=42" in err
        assert "host=graphd-1:9669" in err


@pytest.mark.unit
class TestSessionContext:
    def test_binds_and_clears(self):
        with session_context(7, "graphd-1:9669"):
            assert structlog.contextvars.get_contextvars() == {
                "session_id": 7,
                "host": "graphd-1:9669",
            }
        assert "session_id" not in structlog.contextvars.get_contextvars()

    def test_host_optional(self):
        with session_context(7):
            assert structlog.contextvars.get_contextvars() == {"session_id": 7}

    def test_bound_while_session_executes(self):
        seen = []

        class RecordingTransport(FakeTransport):
            def execute_with_parameter(self, session_id, stmt, params):
                seen.append(structlog.contextvars.get_contextvars())
                return super().execute_with_parameter(session_id, stmt, params)

        transport = RecordingTransport()
        transport.open()
        session = Session(9, Connection(transport.address, transport))

        session.execute("RETURN 1")

        assert seen == [{"session_id": 9, "host": "127.0.0.1:9669"}]
        assert "session_id" not in structlog.contextvars.get_contextvars()
