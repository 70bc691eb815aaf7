"""Sentry integration for error tracking and performance monitoring.

Sentry stays disabled unless a DSN is configured, either explicitly or
through the GRAPH_SESSION_SENTRY_DSN environment variable.
"""

from __future__ import annotations

import os

import sentry_sdk

from graph_session.__about__ import __version__

SENTRY_DSN_ENV = "GRAPH_SESSION_SENTRY_DSN"


def setup_sentry(dsn: str | None = None, environment: str = "local") -> bool:
    """Initialize Sentry. Returns False when no DSN is available."""
    dsn = dsn or os.environ.get(SENTRY_DSN_ENV)
    if not dsn:
        return False
    sentry_sdk.init(
        dsn=dsn,
        traces_sample_rate=0.03,
        environment=environment,
        release=__version__,
        attach_stacktrace=True,
        send_default_pii=False,
    )
    return True
